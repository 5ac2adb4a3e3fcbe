"""In-memory fixed-window rate limiter keyed by numeric client identity."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Dict, Set

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], float]

# Below any elapsed value so the first request always opens a window.
_NO_WINDOW = -(2**63)


@dataclass(frozen=True)
class RateConfig:
    """Requests allowed per client within one window of ``window_length_seconds``."""

    requests_per_window: int
    window_length_seconds: int

    def __post_init__(self) -> None:
        if self.requests_per_window <= 0:
            raise ValueError(
                f"requests_per_window must be positive, got {self.requests_per_window}"
            )
        if self.window_length_seconds <= 0:
            raise ValueError(
                f"window_length_seconds must be positive, got {self.window_length_seconds}"
            )


class RateLimiter:
    """Tracks requests per client within fixed, aligned time windows.

    Windows start at multiples of ``window_length_seconds`` counted from the
    moment the limiter was created. When a request arrives outside the current
    window, every client's count is discarded and a new window begins.

    If no client was registered with :meth:`register_tracked_client`, every
    client is limited. Once at least one client is registered, only registered
    clients are limited and all others pass through uncounted.
    """

    def __init__(self, rate: RateConfig, clock: Clock = time.monotonic) -> None:
        self._rate = rate
        self._clock = clock
        self._started_at = clock()
        self._window_start = _NO_WINDOW
        self._counts: Dict[int, int] = {}
        self._tracked: Set[int] = set()
        self._lock = Lock()

    def record_and_check(self, client_id: int) -> int:
        """Count a request from ``client_id`` and return seconds to wait.

        ``0`` means the request is within the limit. A positive value is the
        number of seconds until the current window rolls over.
        """

        with self._lock:
            if self._tracked and client_id not in self._tracked:
                return 0

            elapsed = int(self._clock() - self._started_at)
            period = self._rate.window_length_seconds
            if self._window_start <= elapsed < self._window_start + period:
                count = self._counts.get(client_id, 0)
                if count < self._rate.requests_per_window:
                    self._counts[client_id] = count + 1
                    return 0
                return period - (elapsed - self._window_start)

            self._counts.clear()
            self._window_start = elapsed - (elapsed % period)
            self._counts[client_id] = 1
            LOGGER.debug("rate window rolled over", extra={"window_start": self._window_start})
            return 0

    def register_tracked_client(self, client_id: int) -> None:
        """Limit ``client_id`` explicitly; ``0`` is ignored."""

        if client_id == 0:
            return
        with self._lock:
            self._tracked.add(client_id)
            tracked = len(self._tracked)
        LOGGER.info("tracked client registered", extra={"tracked_clients": tracked})

    def configured_rate(self) -> RateConfig:
        with self._lock:
            return self._rate

    def active_client_count(self) -> int:
        with self._lock:
            return len(self._counts)
