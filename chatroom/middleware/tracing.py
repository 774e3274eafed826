"""
Request tracing middleware
"""
import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from chatroom.core.logging_config import set_trace_id, generate_trace_id

logger = logging.getLogger(__name__)

TRACE_HEADER = 'X-Trace-ID'


class TracingMiddleware(BaseHTTPMiddleware):
    """Middleware to add trace ID to all requests"""

    async def dispatch(self, request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or generate_trace_id()
        set_trace_id(trace_id)

        start_time = time.time()
        logger.debug(
            f"Request started: {request.method} {request.url.path}",
            extra={'method': request.method, 'path': request.url.path}
        )

        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {request.method} {request.url.path}",
                extra={
                    'method': request.method,
                    'path': request.url.path,
                    'duration_ms': round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Request completed: {request.method} {request.url.path}",
            extra={
                'method': request.method,
                'path': request.url.path,
                'status_code': response.status_code,
                'duration_ms': round(duration_ms, 2)
            }
        )

        response.headers[TRACE_HEADER] = trace_id
        return response
