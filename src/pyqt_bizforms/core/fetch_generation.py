"""Generation counter for discarding stale async responses."""

import threading


class FetchGeneration:
    """
    Monotonic token source for fetch-on-demand data.

    Each fetch takes a token with begin(); when its response arrives the
    caller asks is_current(token). Only the most recently started fetch may
    publish its result, so a slow earlier response can no longer overwrite a
    newer one.

    Usage:
        token = self._generation.begin()
        rows = self._query()          # may run on a worker thread
        if self._generation.is_current(token):
            self.items = rows
    """

    def __init__(self):
        self._value = 0
        self._lock = threading.Lock()

    def begin(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._value

    def invalidate(self) -> None:
        """Make every outstanding token stale (e.g. when the view closes)."""
        self.begin()

    @property
    def value(self) -> int:
        return self._value
