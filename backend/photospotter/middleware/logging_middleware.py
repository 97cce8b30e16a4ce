"""
Request Logging Middleware

Middleware that:
- Assigns a request_id per request (reusing an incoming X-Request-ID)
- Logs request start and end with timing
- Propagates request_id to all logs via contextvars
- Records Prometheus request metrics
"""
import time
import uuid
import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from photospotter.core.logging_config import set_request_id, clear_request_id
from photospotter.core.metrics import record_request_metrics

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
MAX_REQUEST_ID_LENGTH = 64


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every HTTP request with timing and a correlation id."""

    # Paths to exclude from detailed logging
    EXCLUDED_PATHS = {'/health', '/metrics', '/docs', '/redoc', '/openapi.json'}

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER)
        if incoming and len(incoming) <= MAX_REQUEST_ID_LENGTH:
            request_id = incoming
        else:
            request_id = str(uuid.uuid4())

        token = set_request_id(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"
        should_log = path not in self.EXCLUDED_PATHS

        if should_log:
            logger.info(
                "Request started",
                extra={
                    "event_type": "request_start",
                    "method": method,
                    "path": path,
                    "client_ip": client_host,
                }
            )

        try:
            response = await call_next(request)
            response_time_ms = (time.perf_counter() - start_time) * 1000
            response.headers[REQUEST_ID_HEADER] = request_id

            if should_log:
                log_level = logging.INFO if response.status_code < 400 else logging.WARNING
                if response.status_code >= 500:
                    log_level = logging.ERROR

                logger.log(
                    log_level,
                    "Request completed",
                    extra={
                        "event_type": "request_complete",
                        "method": method,
                        "path": path,
                        "status_code": response.status_code,
                        "response_time_ms": round(response_time_ms, 2),
                        "client_ip": client_host,
                    }
                )

            record_request_metrics(
                method=method,
                path=path,
                status_code=response.status_code,
                response_time_seconds=response_time_ms / 1000
            )
            return response

        except Exception as e:
            response_time_ms = (time.perf_counter() - start_time) * 1000

            logger.error(
                "Request failed with exception",
                extra={
                    "event_type": "request_error",
                    "method": method,
                    "path": path,
                    "response_time_ms": round(response_time_ms, 2),
                    "client_ip": client_host,
                    "error_type": type(e).__name__,
                },
                exc_info=True
            )
            record_request_metrics(
                method=method,
                path=path,
                status_code=500,
                response_time_seconds=response_time_ms / 1000
            )
            raise

        finally:
            clear_request_id(token)
