# lider_proxy/upstream/identity_pool.py

"""Round-robin pool of browser identities."""

import itertools
import threading


class IdentityPool:
    """Cycle through user-agent strings, one per outbound attempt.

    The counter is shared by every caller and advances under a lock,
    so concurrent requests never receive a skipped or repeated slot.
    """

    def __init__(self, user_agents: list[str]) -> None:
        if not user_agents:
            msg = "IdentityPool needs at least one user agent"
            raise ValueError(msg)
        self._user_agents: tuple[str, ...] = tuple(user_agents)
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._user_agents)

    def next(self) -> str:
        """Return the next identity in rotation order."""
        with self._lock:
            index = next(self._counter) % len(self._user_agents)
        return self._user_agents[index]
