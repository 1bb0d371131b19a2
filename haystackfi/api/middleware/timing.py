"""
Request Timing Middleware
Adds X-Response-Time and keeps rolling latency numbers for /status and /metrics.
"""

import logging
import math
import time
from collections import Counter, deque
from threading import Lock
from typing import Callable, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..config import get_settings

logger = logging.getLogger(__name__)

PERCENTILES = (50, 95, 99)


def _nearest_rank(ordered, pct: int) -> float:
    rank = max(1, math.ceil(pct / 100.0 * len(ordered)))
    return ordered[rank - 1]


class LatencyTracker:
    """
    Rolling window of request latencies.

    Also counts every response by status class ("2xx", "4xx", ...) and by API
    area (first path segment, e.g. "vendor" or "auth"). The counters are not
    windowed.
    """

    def __init__(self, window_size: int = 1000):
        self.latencies: deque = deque(maxlen=window_size)
        self.status_classes: Counter = Counter()
        self.areas: Counter = Counter()
        self.lock = Lock()

    def record(self, latency_ms: float, status_code: int = 200, path: str = "/") -> None:
        area = path.strip("/").split("/", 1)[0] or "root"
        with self.lock:
            self.latencies.append(latency_ms)
            self.status_classes[f"{status_code // 100}xx"] += 1
            self.areas[area] += 1

    def reset(self) -> None:
        with self.lock:
            self.latencies.clear()
            self.status_classes.clear()
            self.areas.clear()

    def get_status_counts(self) -> Dict[str, int]:
        with self.lock:
            return dict(self.status_classes)

    def get_area_counts(self) -> Dict[str, int]:
        with self.lock:
            return dict(self.areas)

    def get_stats(self) -> Dict[str, float]:
        """
        Summarize the current window.

        Returns:
            Dict with count, p50, p95, p99, mean, min, max (all 0 when empty)
        """
        with self.lock:
            ordered = sorted(self.latencies)

        stats = {"count": len(ordered)}
        if not ordered:
            stats.update({f"p{p}": 0.0 for p in PERCENTILES})
            stats.update(mean=0.0, min=0.0, max=0.0)
            return stats

        stats.update({f"p{p}": _nearest_rank(ordered, p) for p in PERCENTILES})
        stats.update(mean=sum(ordered) / len(ordered), min=ordered[0], max=ordered[-1])
        return stats


# Global latency tracker
_latency_tracker = LatencyTracker()


def get_latency_tracker() -> LatencyTracker:
    """Get global latency tracker."""
    return _latency_tracker


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Times each request, records it and warns above SLOW_REQUEST_MS.
    """

    def __init__(self, app, tracker: Optional[LatencyTracker] = None):
        super().__init__(app)
        self.tracker = tracker or get_latency_tracker()
        self.slow_request_ms = get_settings().slow_request_ms

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        self.tracker.record(elapsed_ms, response.status_code, request.url.path)
        response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"

        if elapsed_ms > self.slow_request_ms:
            logger.warning(
                f"Slow request: {request.method} {request.url.path} took {elapsed_ms:.0f}ms "
                f"(threshold {self.slow_request_ms}ms)"
            )

        return response
