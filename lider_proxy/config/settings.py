# lider_proxy/config/settings.py

"""Central configuration for the lider_proxy service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the lider_proxy service."""

    # --- Pacing & retries ---
    PACING_INTERVAL: float = float(
        os.getenv("LIDER_PACING_INTERVAL", "2.0")
    )                                   # Seconds between request starts
    REQUEST_TIMEOUT: int = int(
        os.getenv("LIDER_REQUEST_TIMEOUT", "45")
    )                                   # Per-attempt timeout
    RETRY_DELAYS: list[float] = [1.0, 3.0, 7.0, 15.0]
    MAX_REDIRECTS: int = 5
    MAX_PAGES: int = 10                 # Hard cap on search pagination

    # --- Anti-bot ---
    ANTI_BOT_HOSTS: list[str] = ["queue-it.net"]
    ANTI_BOT_MARKERS: list[str] = ["queue-it.net", "Queue-it"]

    # --- Browser identities ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    USER_AGENTS: list[str] = [
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (X11; Linux x86_64) "
            "AppleWebKit/537.36 (KHTML, like Gecko) "
            "Chrome/131.0.0.0 Safari/537.36"
        ),
        (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:133.0) "
            "Gecko/20100101 Firefox/133.0"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10.15; rv:133.0) "
            "Gecko/20100101 Firefox/133.0"
        ),
        (
            "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
            "AppleWebKit/605.1.15 (KHTML, like Gecko) "
            "Version/17.2 Safari/605.1.15"
        ),
    ]
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "es-CL,es;q=0.9,en;q=0.8",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
    }
    API_ACCEPT_HEADERS: dict[str, str] = {
        "Accept": "application/json, text/plain, */*",
    }

    # --- Upstream ---
    UPSTREAM_DOMAIN: str = "lider.cl"
    REFERER_URL: str = "https://www.lider.cl/"
    DEFAULT_CURRENCY: str = "CLP"
    HEALTH_PROBE_URLS: list[str] = [
        "https://www.lider.cl/",
        "https://apps.lider.cl/supermercado/",
    ]

    # Structured API candidates, in priority order
    SEARCH_API_URLS: list[str] = [
        "https://apps.lider.cl/supermercado/search?query={query}&page={page}",
    ]
    DETAIL_API_URLS: list[str] = [
        "https://apps.lider.cl/supermercado/product?sku={sku}",
        "https://apps.lider.cl/supermercado/product/{sku}",
        "https://www.lider.cl/catalogo/api/products/{sku}",
    ]
    SUGGESTIONS_API_URLS: list[str] = [
        "https://apps.lider.cl/supermercado/suggestions?term={term}",
    ]
    PROMOTIONS_API_URLS: list[str] = [
        "https://apps.lider.cl/supermercado/promotions?promoType={promo_type}",
    ]
    CATEGORY_API_URLS: list[str] = [
        "https://apps.lider.cl/supermercado/category?categoryId={category_id}",
    ]

    # HTML pages used when every API candidate fails
    SEARCH_PAGE_URL: str = (
        "https://www.lider.cl/supermercado/search?query={query}"
    )
    PRODUCT_PAGE_URL: str = (
        "https://www.lider.cl/supermercado/product/sku/{sku}"
    )
    PROMOTIONS_PAGE_URL: str = (
        "https://www.lider.cl/supermercado/ofertas?type={promo_type}"
    )
    CATEGORY_PAGE_URL: str = (
        "https://www.lider.cl/supermercado/category/{category_id}"
    )
    MAX_SCRAPED_SUGGESTIONS: int = 10

    # --- HTTP server ---
    API_KEY: str = os.getenv("API_KEY", "")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8080"))
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv("CORS_ORIGINS", "*").split(",")
        if o.strip()
    ]

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"
