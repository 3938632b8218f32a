# tests/test_transport.py

"""Tests for ResilientTransport retries, rotation and redirect policy."""

import unittest
from typing import Any
from unittest.mock import MagicMock, call, patch

from lider_proxy.config.settings import Settings
from lider_proxy.upstream.errors import (
    AntiBotRedirectError,
    RetriesExhaustedError,
    TooManyRedirectsError,
)
from lider_proxy.upstream.identity_pool import IdentityPool
from lider_proxy.upstream.response_classifier import (
    VERDICT_HARD_FAILED,
    ResponseClassifier,
)
from lider_proxy.upstream.transport import ResilientTransport

URL = "https://www.lider.cl/supermercado/search?query=leche"


def _resp(
    status: int = 200,
    text: str = "<html>ok</html>",
    headers: dict[str, str] | None = None,
) -> MagicMock:
    """Build a fake curl_cffi response."""
    resp = MagicMock()
    resp.status_code = status
    resp.text = text
    resp.headers = headers or {}
    return resp


def _make_transport(
    session: MagicMock,
    governor: Any = None,
) -> ResilientTransport:
    """Transport wired to a mocked session and governor."""
    return ResilientTransport(
        governor=governor or MagicMock(),
        identities=IdentityPool(Settings.USER_AGENTS),
        classifier=ResponseClassifier(
            Settings.ANTI_BOT_MARKERS, Settings.ANTI_BOT_HOSTS
        ),
        retry_delays=Settings.RETRY_DELAYS,
        timeout=Settings.REQUEST_TIMEOUT,
        max_redirects=Settings.MAX_REDIRECTS,
        base_headers=Settings.DEFAULT_HEADERS,
        upstream_domain=Settings.UPSTREAM_DOMAIN,
        referer=Settings.REFERER_URL,
        session=session,
    )


class TestRetries(unittest.TestCase):
    """Bounded retry loop with increasing backoff."""

    def test_success_returns_immediately(self) -> None:
        """A clean 200 uses one attempt and no backoff."""
        session = MagicMock()
        session.request.return_value = _resp()
        transport = _make_transport(session)

        with patch("lider_proxy.upstream.transport.time.sleep") as sleep:
            result = transport.fetch("GET", URL)

        self.assertTrue(result.ok)
        self.assertEqual(result.text, "<html>ok</html>")
        self.assertEqual(session.request.call_count, 1)
        sleep.assert_not_called()

    def test_429_then_success(self) -> None:
        """A rate-limit response is retried after the first delay."""
        session = MagicMock()
        session.request.side_effect = [_resp(429, ""), _resp()]
        transport = _make_transport(session)

        with patch("lider_proxy.upstream.transport.time.sleep") as sleep:
            result = transport.fetch("GET", URL)

        self.assertTrue(result.ok)
        self.assertEqual(session.request.call_count, 2)
        sleep.assert_called_once_with(1.0)

    def test_exhausted_retries_use_full_schedule(self) -> None:
        """Five attempts with 1s, 3s, 7s, 15s between them."""
        session = MagicMock()
        session.request.return_value = _resp(503, "")
        transport = _make_transport(session)

        with patch("lider_proxy.upstream.transport.time.sleep") as sleep:
            with self.assertRaises(RetriesExhaustedError) as ctx:
                transport.fetch("GET", URL)

        self.assertEqual(session.request.call_count, 5)
        self.assertEqual(
            sleep.call_args_list,
            [call(1.0), call(3.0), call(7.0), call(15.0)],
        )
        self.assertIn("status 503", str(ctx.exception))
        self.assertTrue(ctx.exception.blocked)

    def test_network_error_is_transient(self) -> None:
        """Request exceptions consume a retry slot and are retried."""
        session = MagicMock()
        session.request.side_effect = [
            ConnectionError("reset by peer"),
            _resp(),
        ]
        transport = _make_transport(session)
        result = transport.fetch("GET", URL)
        self.assertTrue(result.ok)
        self.assertEqual(session.request.call_count, 2)

    def test_last_error_is_reported(self) -> None:
        """The exhausted error carries the final attempt's reason."""
        session = MagicMock()
        session.request.side_effect = TimeoutError("timed out")
        transport = _make_transport(session)

        with self.assertRaises(RetriesExhaustedError) as ctx:
            transport.fetch("GET", URL)

        self.assertIn("max retries exceeded", str(ctx.exception))
        self.assertIn("timed out", ctx.exception.last_error)
        self.assertFalse(ctx.exception.blocked)

    def test_anti_bot_marker_triggers_retry(self) -> None:
        """A 200 interstitial page is not returned as a success."""
        session = MagicMock()
        session.request.side_effect = [
            _resp(200, "<html>You are now in line. Queue-it</html>"),
            _resp(200, "<html>products</html>"),
        ]
        transport = _make_transport(session)
        result = transport.fetch("GET", URL)
        self.assertEqual(result.text, "<html>products</html>")
        self.assertEqual(session.request.call_count, 2)

    def test_hard_failure_returned_without_retry(self) -> None:
        """A 500 is handed back to the caller, not retried."""
        session = MagicMock()
        session.request.return_value = _resp(500, "oops")
        transport = _make_transport(session)
        result = transport.fetch("GET", URL)
        self.assertFalse(result.ok)
        self.assertEqual(result.verdict, VERDICT_HARD_FAILED)
        self.assertEqual(result.status_code, 500)
        self.assertEqual(session.request.call_count, 1)


class TestPacing(unittest.TestCase):
    """One governor permit per fetch, shared by its retries."""

    def test_permit_acquired_once_across_retries(self) -> None:
        session = MagicMock()
        session.request.side_effect = [
            _resp(429, ""),
            _resp(429, ""),
            _resp(),
        ]
        governor = MagicMock()
        transport = _make_transport(session, governor)
        transport.fetch("GET", URL)
        governor.acquire.assert_called_once()

    def test_permit_acquired_per_fetch(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp()
        governor = MagicMock()
        transport = _make_transport(session, governor)
        transport.fetch("GET", URL)
        transport.fetch("GET", URL)
        self.assertEqual(governor.acquire.call_count, 2)


class TestHeaders(unittest.TestCase):
    """Identity rotation, baseline headers and referer."""

    def _sent_headers(self, session: MagicMock) -> list[dict[str, str]]:
        return [c.kwargs["headers"] for c in session.request.call_args_list]

    def test_user_agent_rotates_per_attempt(self) -> None:
        session = MagicMock()
        session.request.side_effect = [_resp(429, ""), _resp()]
        transport = _make_transport(session)
        transport.fetch("GET", URL)
        sent = self._sent_headers(session)
        self.assertEqual(sent[0]["User-Agent"], Settings.USER_AGENTS[0])
        self.assertEqual(sent[1]["User-Agent"], Settings.USER_AGENTS[1])

    def test_baseline_and_referer_for_upstream(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp()
        transport = _make_transport(session)
        transport.fetch("GET", URL)
        headers = self._sent_headers(session)[0]
        self.assertEqual(headers["Referer"], Settings.REFERER_URL)
        self.assertEqual(headers["Upgrade-Insecure-Requests"], "1")
        self.assertIn("es-CL", headers["Accept-Language"])

    def test_no_referer_for_foreign_host(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp()
        transport = _make_transport(session)
        transport.fetch("GET", "https://example.com/")
        self.assertNotIn("Referer", self._sent_headers(session)[0])

    def test_extra_headers_override_baseline(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp(200, '{"ok": 1}')
        transport = _make_transport(session)
        transport.fetch("GET", URL, {"Accept": "application/json"})
        headers = self._sent_headers(session)[0]
        self.assertEqual(headers["Accept"], "application/json")

    def test_timeout_and_manual_redirects(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp()
        transport = _make_transport(session)
        transport.fetch("GET", URL)
        kwargs = session.request.call_args.kwargs
        self.assertEqual(kwargs["timeout"], Settings.REQUEST_TIMEOUT)
        self.assertFalse(kwargs["allow_redirects"])


class TestRedirects(unittest.TestCase):
    """Redirects are followed by hand and inspected."""

    def test_redirect_followed(self) -> None:
        session = MagicMock()
        session.request.side_effect = [
            _resp(302, "", {"Location": "/supermercado/search?q=leche"}),
            _resp(200, "<html>final</html>"),
        ]
        transport = _make_transport(session)
        result = transport.fetch("GET", URL)
        self.assertEqual(result.text, "<html>final</html>")
        self.assertEqual(
            result.url, "https://www.lider.cl/supermercado/search?q=leche"
        )

    def test_anti_bot_redirect_aborts_without_retry(self) -> None:
        session = MagicMock()
        session.request.return_value = _resp(
            302, "", {"Location": "https://lider.queue-it.net/?c=lider"}
        )
        transport = _make_transport(session)

        with patch("lider_proxy.upstream.transport.time.sleep") as sleep:
            with self.assertRaises(AntiBotRedirectError) as ctx:
                transport.fetch("GET", URL)

        self.assertEqual(session.request.call_count, 1)
        sleep.assert_not_called()
        self.assertTrue(ctx.exception.blocked)
        self.assertIn("queue-it", str(ctx.exception))

    def test_too_many_redirects(self) -> None:
        """A sixth redirect hop is a structural failure."""
        session = MagicMock()
        session.request.return_value = _resp(
            302, "", {"Location": "https://www.lider.cl/loop"}
        )
        transport = _make_transport(session)

        with self.assertRaises(TooManyRedirectsError):
            transport.fetch("GET", URL)

        self.assertEqual(
            session.request.call_count, Settings.MAX_REDIRECTS + 1
        )

    def test_five_redirects_allowed(self) -> None:
        session = MagicMock()
        hop = _resp(301, "", {"Location": "https://www.lider.cl/next"})
        session.request.side_effect = [hop] * 5 + [_resp()]
        transport = _make_transport(session)
        self.assertTrue(transport.fetch("GET", URL).ok)


if __name__ == "__main__":
    unittest.main()
