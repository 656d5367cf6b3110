import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from structlog.contextvars import bind_contextvars, clear_contextvars

from roof_estimator.config import settings
from roof_estimator.observability.logging import log


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Binds a request id to every log line emitted while serving a request."""

    def __init__(self, app, header_name: str | None = None):
        super().__init__(app)
        self.header_name = header_name or settings.request_id_header

    async def dispatch(self, request: Request, call_next: Callable):
        clear_contextvars()

        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        bind_contextvars(request_id=request_id, path=request.url.path)

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            log().exception("http_request_failed", method=request.method)
            raise

        response.headers[self.header_name] = request_id
        log().info(
            "http_request_completed",
            method=request.method,
            status_code=response.status_code,
            latency_ms=int((time.perf_counter() - start) * 1000),
        )
        return response
