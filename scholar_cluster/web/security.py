# scholar_cluster/web/security.py

from __future__ import annotations

import secrets
import threading
import time
from typing import Dict, Optional, Tuple

from fastapi import Header, HTTPException, Request, status

from scholar_cluster.config.settings import get_settings


def api_key_auth(x_api_key: Optional[str] = Header(default=None, alias="X-API-Key")) -> None:
    """
    Header-based API key check. Disabled while settings.API_KEY is unset.
    """
    configured = get_settings().API_KEY
    if configured is None:
        return

    expected = configured.get_secret_value()
    if x_api_key is None or not secrets.compare_digest(x_api_key, expected):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or missing API key.",
        )


class RateLimiter:
    """
    Fixed-window request counter per client host, for a single process.

    Search requests are served from a thread pool, so the window table is
    guarded by a lock.
    """

    def __init__(self, max_requests: int, window_seconds: float) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        # host -> (window_start, count)
        self._windows: Dict[str, Tuple[float, int]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, now: Optional[float] = None) -> bool:
        """Count one request for `key`; False once the window is exhausted."""
        now = time.time() if now is None else now
        with self._lock:
            window_start, count = self._windows.get(key, (now, 0))
            if now - window_start >= self.window_seconds:
                window_start, count = now, 0
            count += 1
            self._windows[key] = (window_start, count)
        return count <= self.max_requests

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()

    def __call__(self, request: Request) -> None:
        client_host = request.client.host if request.client else "unknown"
        if not self.hit(client_host):
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded. Try again later.",
            )


rate_limiter = RateLimiter(
    max_requests=get_settings().RATE_LIMIT_MAX_REQUESTS,
    window_seconds=get_settings().RATE_LIMIT_WINDOW_SECONDS,
)
