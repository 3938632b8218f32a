# main.py

"""Entry point for lider_proxy (HTTP server or headless CLI)."""

import argparse
import asyncio
import logging
import sys

from lider_proxy.cli.runner import OPERATIONS
from lider_proxy.config.logging_config import setup_logging
from lider_proxy.config.settings import Settings

logger = logging.getLogger("lider_proxy.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="lider_proxy",
        description="REST proxy for the Lider supermarket catalog.",
        epilog="Run without arguments to start the HTTP server.",
    )
    parser.add_argument(
        "--op",
        choices=OPERATIONS,
        default=None,
        dest="operation",
        help="Run a single catalog operation headless and exit.",
    )
    parser.add_argument(
        "value",
        nargs="?",
        default=None,
        help="Parameter for --op (search term, SKU, promo type, ...).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format for --op (default: json).",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        default=False,
        help="Run a connectivity health check on the upstream hosts.",
    )
    parser.add_argument(
        "--host",
        default=Settings.HOST,
        help=f"Bind address for the server (default: {Settings.HOST}).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=Settings.PORT,
        help=f"Port for the server (default: {Settings.PORT}).",
    )
    return parser


def _run_server(host: str, port: int) -> None:
    """Serve the FastAPI app with uvicorn."""
    import uvicorn

    from lider_proxy.api.app import create_app

    try:
        app = create_app()
    except RuntimeError as exc:
        logger.critical("Cannot start server: %s", exc)
        sys.stderr.write(f"ERROR: {exc}\n")
        sys.exit(1)

    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        logger.info("lider_proxy server shutting down")


def _run_operation(args: argparse.Namespace) -> None:
    """Run one operation headless and exit."""
    from lider_proxy.cli.runner import run_operation

    exit_code = run_operation(
        args.operation, args.value or "", args.output_format
    )
    sys.exit(exit_code)


def _run_health_check() -> None:
    """Run upstream connectivity health check."""
    from lider_proxy.cli.runner import run_health_check

    exit_code = asyncio.run(run_health_check())
    sys.exit(exit_code)


def main() -> None:
    """Route to the server (no --op) or a headless CLI operation."""
    log_file = setup_logging()
    logger.info("lider_proxy starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    if args.health:
        _run_health_check()
    elif args.operation is not None:
        _run_operation(args)
    else:
        _run_server(args.host, args.port)


if __name__ == "__main__":
    main()
