# lider_proxy/api/app.py

"""FastAPI routing layer over the fetch orchestrator."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lider_proxy.api.auth import ApiError, require_api_key
from lider_proxy.config.settings import Settings
from lider_proxy.services.fetch_orchestrator import FetchOrchestrator
from lider_proxy.services.service_factory import build_orchestrator
from lider_proxy.upstream.errors import (
    InvalidParameterError,
    UpstreamFetchError,
)

logger = logging.getLogger("lider_proxy.api")

router = APIRouter(dependencies=[Depends(require_api_key)])


def _orchestrator(request: Request) -> FetchOrchestrator:
    orchestrator: FetchOrchestrator = request.app.state.orchestrator
    return orchestrator


def _required(value: str | None, name: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ApiError(400, {"error": f"parameter '{name}' is required"})
    return cleaned


def _products_envelope(
    key: str,
    value: str,
    outcome: Any,
) -> dict[str, Any]:
    products = [p.to_dict() for p in outcome.data]
    return {
        key: value,
        "count": len(products),
        "source": outcome.source,
        "products": products,
    }


@router.get("/productos")
def search_products(
    request: Request,
    q: str | None = Query(default=None),
) -> dict[str, Any]:
    query = _required(q, "q")
    outcome = _orchestrator(request).search(query)
    return _products_envelope("query", query, outcome)


@router.get("/producto")
def product_detail(
    request: Request,
    sku: str | None = Query(default=None),
) -> dict[str, Any]:
    value = _required(sku, "sku")
    outcome = _orchestrator(request).product_detail(value)
    return {
        "sku": value,
        "source": outcome.source,
        "product": outcome.data.to_dict(),
    }


@router.get("/suggestions")
def suggestions(
    request: Request,
    term: str | None = Query(default=None),
) -> dict[str, Any]:
    value = _required(term, "term")
    outcome = _orchestrator(request).suggestions(value)
    return {
        "term": value,
        "count": len(outcome.data),
        "source": outcome.source,
        "suggestions": outcome.data,
    }


@router.get("/promotions")
def promotions(
    request: Request,
    promo_type: str | None = Query(default=None, alias="type"),
) -> dict[str, Any]:
    value = _required(promo_type, "type")
    outcome = _orchestrator(request).promotions(value)
    return _products_envelope("type", value, outcome)


@router.get("/categories")
def categories(
    request: Request,
    category_id: str | None = Query(default=None, alias="id"),
) -> dict[str, Any]:
    value = _required(category_id, "id")
    outcome = _orchestrator(request).category(value)
    return _products_envelope("id", value, outcome)


async def _api_error_handler(_: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.payload)


async def _invalid_parameter_handler(
    _: Request, exc: Exception,
) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


async def _upstream_error_handler(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def _unexpected_error_handler(
    request: Request, exc: Exception,
) -> JSONResponse:
    logger.critical(
        "Unhandled error on %s", request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=500, content={"error": "internal server error"}
    )


def create_app(
    orchestrator: FetchOrchestrator | None = None,
    api_key: str | None = None,
) -> FastAPI:
    """Build the application around one shared orchestrator.

    Raises:
        RuntimeError: No API key was given or configured.
    """
    key = api_key if api_key is not None else Settings.API_KEY
    if not key:
        msg = "API_KEY environment variable is not set"
        raise RuntimeError(msg)

    app = FastAPI(title="Lider Catalog Proxy")
    app.state.api_key = key
    app.state.orchestrator = orchestrator or build_orchestrator()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=Settings.CORS_ORIGINS,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    app.add_exception_handler(ApiError, _api_error_handler)
    app.add_exception_handler(
        InvalidParameterError, _invalid_parameter_handler
    )
    app.add_exception_handler(UpstreamFetchError, _upstream_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(router)
    return app
