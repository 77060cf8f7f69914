from __future__ import annotations

import threading
import time
from collections.abc import Callable

from quotes.logger import get_logger

logger = get_logger(__name__)


class CircuitBreaker:
    """Consecutive-failure breaker guarding calls to the upstream provider.

    Open means callers should skip upstream and serve their fallback. Once
    ``reset_timeout`` has passed a single trial call is let through; its
    outcome closes or reopens the circuit.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        reset_timeout: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.name = name
        self.failure_threshold = max(1, failure_threshold)
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._failures = 0
        self._opened_at: float | None = None
        self._trial_in_flight = False

    @property
    def state(self) -> str:
        with self._lock:
            if self._opened_at is None:
                return "closed"
            if self._clock() - self._opened_at >= self.reset_timeout:
                return "half_open"
            return "open"

    def allow_request(self) -> bool:
        with self._lock:
            if self._opened_at is None:
                return True
            if self._clock() - self._opened_at < self.reset_timeout:
                return False
            if self._trial_in_flight:
                return False
            self._trial_in_flight = True
            return True

    def record_success(self) -> None:
        with self._lock:
            was_open = self._opened_at is not None
            self._failures = 0
            self._opened_at = None
            self._trial_in_flight = False
        if was_open:
            logger.info("circuit closed", circuit=self.name)

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            trial_failed = self._trial_in_flight
            self._trial_in_flight = False
            if not trial_failed and self._failures < self.failure_threshold:
                return
            self._opened_at = self._clock()
            failures = self._failures
        logger.warning("circuit opened", circuit=self.name, consecutive_failures=failures)
