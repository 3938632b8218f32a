# tests/test_settings.py

"""Tests for the Settings configuration class."""

import unittest
from pathlib import Path

from lider_proxy.config.settings import Settings


class TestSettings(unittest.TestCase):
    """Verify Settings constants and upstream endpoint registry."""

    def test_pacing_interval_is_positive_float(self) -> None:
        """PACING_INTERVAL must be a positive number."""
        self.assertIsInstance(Settings.PACING_INTERVAL, float)
        self.assertGreater(Settings.PACING_INTERVAL, 0)

    def test_request_timeout_is_positive_int(self) -> None:
        """REQUEST_TIMEOUT must be a positive integer."""
        self.assertIsInstance(Settings.REQUEST_TIMEOUT, int)
        self.assertGreater(Settings.REQUEST_TIMEOUT, 0)

    def test_retry_delays_increase(self) -> None:
        """Backoff delays grow with every retry."""
        delays = Settings.RETRY_DELAYS
        self.assertEqual(len(delays), 4)
        self.assertEqual(delays, sorted(delays))
        self.assertEqual(len(set(delays)), len(delays))

    def test_at_least_six_identities(self) -> None:
        """The rotation pool carries at least six user agents."""
        self.assertGreaterEqual(len(Settings.USER_AGENTS), 6)
        self.assertEqual(
            len(Settings.USER_AGENTS), len(set(Settings.USER_AGENTS))
        )

    def test_max_redirects(self) -> None:
        """Redirect chains are capped at five hops."""
        self.assertEqual(Settings.MAX_REDIRECTS, 5)

    def test_default_headers_look_like_a_browser(self) -> None:
        """DEFAULT_HEADERS carry the navigation header set."""
        for header in (
            "Accept",
            "Accept-Language",
            "Cache-Control",
            "Sec-Fetch-Mode",
            "Upgrade-Insecure-Requests",
        ):
            with self.subTest(header=header):
                self.assertIn(header, Settings.DEFAULT_HEADERS)

    def test_api_accept_headers_request_json(self) -> None:
        """API candidates are requested with a JSON Accept header."""
        self.assertIn(
            "application/json", Settings.API_ACCEPT_HEADERS["Accept"]
        )

    def test_detail_candidates_are_ordered(self) -> None:
        """Three detail API candidates, apps host first."""
        self.assertEqual(len(Settings.DETAIL_API_URLS), 3)
        self.assertIn("apps.lider.cl", Settings.DETAIL_API_URLS[0])

    def test_url_templates_accept_their_parameters(self) -> None:
        """Every template formats with its documented parameter."""
        self.assertIn(
            "query=leche",
            Settings.SEARCH_PAGE_URL.format(query="leche"),
        )
        self.assertTrue(
            Settings.PRODUCT_PAGE_URL.format(sku="42").endswith("/sku/42")
        )
        self.assertIn(
            "type=ofertas",
            Settings.PROMOTIONS_PAGE_URL.format(promo_type="ofertas"),
        )
        self.assertTrue(
            Settings.CATEGORY_PAGE_URL.format(category_id="7").endswith("/7")
        )

    def test_anti_bot_host_listed(self) -> None:
        """queue-it is treated as an anti-bot interstitial."""
        self.assertIn("queue-it.net", Settings.ANTI_BOT_HOSTS)

    def test_path_constants_are_paths(self) -> None:
        """Path-typed settings are Path instances."""
        self.assertIsInstance(Settings.BASE_DIR, Path)
        self.assertIsInstance(Settings.LOGS_DIR, Path)

    def test_impersonate_browser_is_string(self) -> None:
        """IMPERSONATE_BROWSER must be a non-empty string."""
        self.assertIsInstance(Settings.IMPERSONATE_BROWSER, str)
        self.assertTrue(len(Settings.IMPERSONATE_BROWSER) > 0)


if __name__ == "__main__":
    unittest.main()
