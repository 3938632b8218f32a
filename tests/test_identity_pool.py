# tests/test_identity_pool.py

"""Tests for the round-robin identity pool."""

import threading
import unittest
from collections import Counter

from lider_proxy.config.settings import Settings
from lider_proxy.upstream.identity_pool import IdentityPool


class TestIdentityPool(unittest.TestCase):
    """Rotation order and concurrency safety."""

    def test_round_robin_order(self) -> None:
        """Identities are handed out in list order."""
        pool = IdentityPool(["a", "b", "c"])
        self.assertEqual([pool.next() for _ in range(3)], ["a", "b", "c"])

    def test_cycle_repeats_after_n(self) -> None:
        """After N acquisitions the sequence starts over."""
        agents = Settings.USER_AGENTS
        pool = IdentityPool(agents)
        n = len(pool)
        first = [pool.next() for _ in range(n)]
        second = [pool.next() for _ in range(n)]
        self.assertEqual(first, list(agents))
        self.assertEqual(first, second)

    def test_empty_pool_rejected(self) -> None:
        """A pool needs at least one identity."""
        with self.assertRaises(ValueError):
            IdentityPool([])

    def test_concurrent_rotation_is_balanced(self) -> None:
        """Concurrent callers never skip or double up a slot."""
        pool = IdentityPool(["a", "b", "c", "d"])
        seen: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            for _ in range(100):
                ua = pool.next()
                with lock:
                    seen.append(ua)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        counts = Counter(seen)
        self.assertEqual(len(seen), 800)
        self.assertEqual(set(counts.values()), {200})


if __name__ == "__main__":
    unittest.main()
