"""
Request Logging Middleware
Logs each request's outcome and propagates a request ID.
"""

import logging
import time
import uuid
from typing import Callable, Dict, Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def _context(request: Request, request_id: str, started: float, **fields: Any) -> Dict[str, Any]:
    context = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "duration_ms": round((time.time() - started) * 1000, 2),
    }
    context.update(fields)
    return context


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request with method, path, status and duration.

    The request ID is taken from X-Request-ID when the caller sends one,
    generated otherwise, stored on ``request.state`` and echoed back.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} raised {e.__class__.__name__}",
                exc_info=True,
                extra=_context(request, request_id, started, error=str(e)),
            )
            raise

        context = _context(request, request_id, started, status_code=response.status_code)
        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({context['duration_ms']}ms)",
            extra=context,
        )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
