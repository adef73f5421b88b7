from __future__ import annotations

import threading
import time
from collections.abc import Callable


class ExpiringTextStore:
    """Process-local key/value store of serialized answers with per-entry expiry."""

    def __init__(self, default_ttl_s: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.default_ttl_s = max(1, int(default_ttl_s))
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}
        self._lock = threading.Lock()

    def read(self, key: str) -> str | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            deadline, text = entry
            if deadline <= self._clock():
                del self._entries[key]
                return None
            return text

    def write(self, key: str, text: str, ttl_s: int | None = None) -> None:
        lifetime = self.default_ttl_s if ttl_s is None else max(1, int(ttl_s))
        with self._lock:
            self._entries[key] = (self._clock() + lifetime, text)

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [key for key, (deadline, _) in self._entries.items() if deadline <= now]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
