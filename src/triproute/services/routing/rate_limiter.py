"""Sliding-window pacing for outbound calls to an external API family."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from typing import Iterator

from .errors import RateLimitTimeout

logger = logging.getLogger(__name__)

# Slots start out expired, so the first max_requests calls go out without spacing.
_EXPIRED = float("-inf")


class SlidingWindowRateLimiter:
    """Allows at most ``max_requests`` calls to start within any ``window_seconds``.

    The limiter keeps one start timestamp per slot in a FIFO queue. A caller takes
    the oldest timestamp, sleeps until it has aged by a full window, issues its
    call and hands the slot back stamped with the call's start time.

    Build one instance per external API family and pass it to every client of
    that family; the queue is guarded by the instance's own lock.
    """

    def __init__(self, max_requests: int, window_seconds: float, *, name: str = "default") -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1.")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive.")
        self.name = name
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._timestamps: deque[float] = deque([_EXPIRED] * max_requests)
        # Callers are admitted in arrival order; a newcomer never overtakes a waiter.
        self._tickets: deque[object] = deque()
        self._condition = threading.Condition()

    def acquire(self, deadline: float | None = None) -> float:
        """Block until a slot may be used and return the call's start timestamp.

        ``deadline`` is an absolute ``time.monotonic()`` value. The returned
        timestamp must be passed to :meth:`release` once the call is done.
        """
        ticket = object()
        with self._condition:
            self._tickets.append(ticket)
            try:
                while not self._timestamps or self._tickets[0] is not ticket:
                    remaining = None if deadline is None else deadline - time.monotonic()
                    if remaining is not None and remaining <= 0:
                        raise RateLimitTimeout(f"No '{self.name}' rate limiter slot became free before the deadline.")
                    self._condition.wait(timeout=remaining)
            finally:
                self._tickets.remove(ticket)
                # Wake the next ticket holder, a slot may still be free.
                self._condition.notify_all()
            oldest = self._timestamps.popleft()

        wait = self.window_seconds - (time.monotonic() - oldest)
        if wait > 0:
            if deadline is not None and time.monotonic() + wait > deadline:
                self._give_back(oldest)
                raise RateLimitTimeout(
                    f"Waiting {wait:.2f}s for the '{self.name}' rate limiter would overrun the deadline."
                )
            logger.debug(f"Rate limiter '{self.name}' waiting {wait:.3f}s for a slot")
            time.sleep(wait)
        return time.monotonic()

    def release(self, started_at: float) -> None:
        with self._condition:
            self._timestamps.append(started_at)
            self._condition.notify_all()

    @contextmanager
    def slot(self, deadline: float | None = None) -> Iterator[float]:
        started_at = self.acquire(deadline)
        try:
            yield started_at
        finally:
            self.release(started_at)

    def available_slots(self) -> int:
        with self._condition:
            return len(self._timestamps)

    def _give_back(self, timestamp: float) -> None:
        # An unused slot keeps its old timestamp and its place at the head of the queue.
        with self._condition:
            self._timestamps.appendleft(timestamp)
            self._condition.notify_all()
