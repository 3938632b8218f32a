# lider_proxy/api/auth.py

"""X-API-Key header authentication for the catalog routes."""

import hmac
import logging

from fastapi import Request

logger = logging.getLogger("lider_proxy.api")

API_KEY_HEADER = "X-API-Key"


class ApiError(Exception):
    """An error response with an explicit status code and JSON body."""

    def __init__(self, status_code: int, payload: dict[str, str]) -> None:
        super().__init__(payload.get("error", ""))
        self.status_code = status_code
        self.payload = payload


def require_api_key(request: Request) -> None:
    """Reject requests whose ``X-API-Key`` header is missing or wrong."""
    expected: str = request.app.state.api_key
    provided = request.headers.get(API_KEY_HEADER, "")
    client_ip = request.client.host if request.client else "-"
    user_agent = request.headers.get("User-Agent", "")

    if not provided:
        logger.warning(
            "AUTH FAILED: missing API key - IP: %s, UA: %s, Path: %s",
            client_ip,
            user_agent,
            request.url.path,
        )
        raise ApiError(
            401,
            {
                "error": "API key is required",
                "hint": f"Include {API_KEY_HEADER} header with your request",
            },
        )

    if not hmac.compare_digest(provided.encode(), expected.encode()):
        logger.warning(
            "AUTH FAILED: invalid API key - IP: %s, UA: %s, Path: %s",
            client_ip,
            user_agent,
            request.url.path,
        )
        raise ApiError(403, {"error": "Invalid API key"})

    logger.debug("AUTH OK: IP: %s, Path: %s", client_ip, request.url.path)
