from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Mapping

UNKNOWN_CLIENT = "unknown"


@dataclass
class WindowCounter:
    count: int
    window_start: float


class RateLimiter:
    """Fixed-window request counter keyed by (client, action).

    A window opens on the first request for a key and is replaced once more
    than ``window_seconds`` have elapsed since it opened. Counters are never
    evicted.
    """

    def __init__(self) -> None:
        self._counters: dict[tuple[str, str], WindowCounter] = {}
        self._lock = threading.Lock()

    def check_and_record(
        self,
        client_id: str,
        action: str,
        max_count: int,
        window_seconds: float,
        now: float | None = None,
    ) -> bool:
        moment = time.monotonic() if now is None else now
        key = (client_id, action)
        with self._lock:
            counter = self._counters.get(key)
            if counter is None or moment - counter.window_start > window_seconds:
                self._counters[key] = WindowCounter(count=1, window_start=moment)
                return False
            counter.count += 1
            return counter.count > max_count

    def reset(self, client_id: str | None = None, action: str | None = None) -> None:
        with self._lock:
            if client_id is None and action is None:
                self._counters.clear()
                return
            for key in list(self._counters):
                if (client_id is None or key[0] == client_id) and (action is None or key[1] == action):
                    del self._counters[key]

    def __len__(self) -> int:
        return len(self._counters)


def client_identifier(headers: Mapping[str, str]) -> str:
    # Forwarded headers are trusted as sent; any client can pick its own bucket.
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return forwarded
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip
    return UNKNOWN_CLIENT
