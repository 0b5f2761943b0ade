import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
import logging

from .config import LOG_EXCLUDE_PATHS
from .logging_config import trace_id_var
from .services.prometheus_metrics import prometheus_metrics

logger = logging.getLogger("nimbus.http")


class TracingMiddleware(BaseHTTPMiddleware):
    """Request tracing: X-Request-ID propagation, access logging and request metrics"""

    def __init__(self, app: ASGIApp, exclude_paths=None):
        super().__init__(app)
        self.exclude_paths = set(exclude_paths if exclude_paths is not None else LOG_EXCLUDE_PATHS)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate or reuse trace ID
        trace_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = trace_id_var.set(trace_id)

        client_ip = request.client.host if request.client else "unknown"
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            logger.error(f"Request failed: {str(e)}", extra={
                "method": request.method,
                "path": request.url.path,
                "status": 500,
                "latency_ms": latency_ms,
                "client_ip": client_ip,
            })
            prometheus_metrics.increment_requests(500, request.url.path)
            raise
        else:
            latency_ms = round((time.time() - start_time) * 1000, 2)
            self._log_request(request.method, request.url.path, response.status_code, latency_ms, client_ip)
            prometheus_metrics.increment_requests(response.status_code, request.url.path)
            response.headers["X-Request-ID"] = trace_id
            return response
        finally:
            trace_id_var.reset(token)

    def _log_request(self, method: str, path: str, status: int, latency_ms: float, client_ip: str):
        if path in self.exclude_paths:
            return

        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(log_level, "HTTP Request", extra={
            "method": method,
            "path": path,
            "status": status,
            "latency_ms": latency_ms,
            "client_ip": client_ip,
        })
