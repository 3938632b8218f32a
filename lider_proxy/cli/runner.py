# lider_proxy/cli/runner.py

"""Headless CLI runner: one catalog operation, or an upstream health check."""

import json
import logging
import sys
from typing import Any

from rich.console import Console
from rich.table import Table

from lider_proxy.config.settings import Settings
from lider_proxy.models.fetch_outcome import FetchOutcome
from lider_proxy.models.product import ProductDetail, ProductSummary
from lider_proxy.services.fetch_orchestrator import FetchOrchestrator
from lider_proxy.services.health_checker import UpstreamHealthChecker
from lider_proxy.services.service_factory import (
    build_orchestrator,
    build_transport,
)
from lider_proxy.upstream.errors import (
    InvalidParameterError,
    UpstreamFetchError,
)

logger = logging.getLogger("lider_proxy.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)

OPERATIONS: tuple[str, ...] = (
    "search",
    "detail",
    "suggestions",
    "promotions",
    "category",
)


def _dispatch(
    orchestrator: FetchOrchestrator,
    operation: str,
    value: str,
) -> FetchOutcome:
    handlers = {
        "search": orchestrator.search,
        "detail": orchestrator.product_detail,
        "suggestions": orchestrator.suggestions,
        "promotions": orchestrator.promotions,
        "category": orchestrator.category,
    }
    return handlers[operation](value)


def outcome_to_json(outcome: FetchOutcome) -> Any:
    """Serialise an outcome's payload to plain JSON-ready data."""
    data = outcome.data
    if isinstance(data, ProductDetail):
        return data.to_dict()
    if isinstance(data, list):
        return [
            item.to_dict() if isinstance(item, ProductSummary) else item
            for item in data
        ]
    return data


def _print_products_table(products: list[ProductSummary]) -> None:
    """Render a Rich table of product summaries to stdout."""
    table = Table(
        title="Lider Results",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("ID", style="dim")
    table.add_column("Name", max_width=60)
    table.add_column("Brand", style="magenta")
    table.add_column("Sale", justify="right", style="green")
    table.add_column("Reference", justify="right")

    for idx, p in enumerate(products, 1):
        table.add_row(
            str(idx),
            p.id or "—",
            p.display_name[:60],
            p.brand or "—",
            f"$ {p.price.sale:,.0f}" if p.price.sale > 0 else "N/A",
            (
                f"$ {p.price.reference:,.0f}"
                if p.price.reference > 0
                else "N/A"
            ),
        )

    Console().print(table)


def _print_detail_table(detail: ProductDetail) -> None:
    table = Table(title=f"SKU {detail.sku}", title_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", detail.name)
    table.add_row("Brand", detail.brand or "—")
    table.add_row(
        "Price",
        f"{detail.price.currency} {detail.price.current:,.0f}",
    )
    table.add_row(
        "Original",
        f"{detail.price.currency} {detail.price.original:,.0f}",
    )
    table.add_row("Discount", f"{detail.price.discount:.1f}%")
    table.add_row("Available", "yes" if detail.availability else "no")
    table.add_row("URL", detail.url)
    Console().print(table)


def _print_table(outcome: FetchOutcome) -> None:
    data = outcome.data
    if isinstance(data, ProductDetail):
        _print_detail_table(data)
    elif data and isinstance(data[0], ProductSummary):
        _print_products_table(data)
    else:
        for item in data:
            Console().print(f"• {item}")


def run_operation(
    operation: str,
    value: str,
    output_format: str = "json",
    orchestrator: FetchOrchestrator | None = None,
) -> int:
    """Run one operation and return an exit code (0=ok, 1=fail)."""
    orch = orchestrator or build_orchestrator()
    _err.print(f"[bold]{operation}:[/bold] {value}")

    try:
        outcome = _dispatch(orch, operation, value)
    except InvalidParameterError as exc:
        _err.print(f"[red]Invalid input: {exc}[/red]")
        return 1
    except UpstreamFetchError as exc:
        logger.error("CLI %s '%s' failed: %s", operation, value, exc)
        _err.print(f"[red]Error: {exc}[/red]")
        return 1

    count = len(outcome.data) if isinstance(outcome.data, list) else 1
    _err.print(
        f"[green]✓ {count} result(s)[/green] "
        f"[dim]source={outcome.source}[/dim]"
    )

    if output_format == "table":
        _print_table(outcome)
    else:
        json.dump(
            outcome_to_json(outcome),
            sys.stdout,
            ensure_ascii=False,
            indent=2,
        )
        sys.stdout.write("\n")
    return 0


async def run_health_check() -> int:
    """Run a connectivity health check against the upstream hosts."""
    _err.print("[bold]Running upstream health check...[/bold]")
    checker = UpstreamHealthChecker(
        build_transport(), Settings.HEALTH_PROBE_URLS
    )
    results = await checker.check_all()

    table = Table(
        title="Upstream Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("URL", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = (
            f"{r.latency_ms:.0f}ms"
            if r.latency_ms > 0
            else "—"
        )
        table.add_row(r.url, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
