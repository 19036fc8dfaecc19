"""
Request Timing Middleware
Tracks request latency; submissions wait on receipt recognition, so slow
requests are logged.
"""

import logging
import time
from typing import Callable, Dict, List
from collections import deque
from threading import Lock
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

SLOW_REQUEST_MS = 3000


class LatencyTracker:
    """
    Rolling window of recent request latencies.
    """

    def __init__(self, window_size: int = 1000):
        self.latencies: deque = deque(maxlen=window_size)
        self.lock = Lock()

    def record(self, latency_ms: float) -> None:
        with self.lock:
            self.latencies.append(latency_ms)

    def get_stats(self) -> Dict[str, float]:
        """
        Get latency statistics.

        Returns:
            Dict with count, p50, p95, p99
        """
        with self.lock:
            ordered = sorted(self.latencies)

        return {
            "count": len(ordered),
            "p50": self._percentile(ordered, 50),
            "p95": self._percentile(ordered, 95),
            "p99": self._percentile(ordered, 99),
        }

    @staticmethod
    def _percentile(sorted_values: List[float], percentile: int) -> float:
        if not sorted_values:
            return 0.0
        index = min(int((percentile / 100.0) * len(sorted_values)), len(sorted_values) - 1)
        return sorted_values[index]


_latency_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    """Get global latency tracker."""
    return _latency_tracker


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """Records latency for each request and adds an X-Response-Time header."""

    def __init__(self, app, tracker: LatencyTracker = None, slow_ms: float = SLOW_REQUEST_MS):
        super().__init__(app)
        self.tracker = tracker or get_latency_tracker()
        self.slow_ms = slow_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000

        self.tracker.record(duration_ms)
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        if duration_ms > self.slow_ms:
            logger.warning(
                "Slow request detected",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "duration_ms": duration_ms,
                },
            )

        return response
