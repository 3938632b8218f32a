# lider_proxy/upstream/rate_governor.py

"""Process-wide pacing gate for outbound upstream requests."""

import logging
import threading
import time

logger = logging.getLogger("lider_proxy.governor")


class RateGovernor:
    """Enforce a minimum interval between the starts of upstream requests.

    Each caller reserves the next free start slot under a lock and then
    sleeps outside it until that slot arrives. Slots are handed out in
    lock-acquisition order and are always ``interval`` seconds apart,
    so no caller can start inside another caller's interval.
    """

    def __init__(self, interval: float) -> None:
        if interval < 0:
            msg = f"interval must be >= 0, got {interval}"
            raise ValueError(msg)
        self.interval = interval
        self._next_slot: float | None = None
        self._lock = threading.Lock()

    def acquire(self) -> float:
        """Block until a permit is available.

        Returns:
            The monotonic timestamp of the reserved start slot.
        """
        with self._lock:
            now = time.monotonic()
            if self._next_slot is None or self._next_slot < now:
                slot = now
            else:
                slot = self._next_slot
            self._next_slot = slot + self.interval

        wait = slot - time.monotonic()
        if wait > 0:
            logger.debug("Pacing: waiting %.2fs for permit", wait)
            time.sleep(wait)
        return slot
