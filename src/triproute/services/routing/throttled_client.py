"""HTTP client whose every request is paced by a shared rate limiter."""

from __future__ import annotations

from typing import Any

import httpx

from .rate_limiter import SlidingWindowRateLimiter


class ThrottledClient:
    def __init__(
        self,
        limiter: SlidingWindowRateLimiter,
        *,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.limiter = limiter
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> httpx.Client:
        """Return the injected client, or a fresh one for a single request."""
        if self._client is not None:
            return self._client
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def request(self, method: str, url: str, *, deadline: float | None = None, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        try:
            with self.limiter.slot(deadline):
                return client.request(method, url, **kwargs)
        finally:
            if client is not self._client:
                client.close()

    def get(self, url: str, *, deadline: float | None = None, **kwargs: Any) -> httpx.Response:
        return self.request("GET", url, deadline=deadline, **kwargs)

    def post(self, url: str, *, deadline: float | None = None, **kwargs: Any) -> httpx.Response:
        return self.request("POST", url, deadline=deadline, **kwargs)
