"""Request context middleware: request IDs, timing, completion log line.

The request id lives in a ContextVar so every log line emitted while
handling the request, including the lifecycle services' audit lines,
carries it without passing it through call signatures.  Sync endpoints
run in a worker thread, and Starlette copies the context into it.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestContextFilter(logging.Filter):
    """Attach the current request id to every LogRecord."""

    def filter(self, record: logging.LogRecord) -> bool:
        # An explicit extra={"request_id": ...} wins over the ContextVar.
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get("-")  # type: ignore[attr-defined]
        return True


def install_request_context_filter(target: logging.Logger | logging.Handler) -> None:
    if not any(isinstance(f, _RequestContextFilter) for f in target.filters):
        target.addFilter(_RequestContextFilter())


install_request_context_filter(logging.getLogger())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a request ID, time the request, log one summary line.

    Honors an incoming X-Request-ID so callers can correlate a verify
    lookup with their own logs; echoes it on the response.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        token = request_id_var.set(req_id)

        start = time.monotonic()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        duration_ms = round((time.monotonic() - start) * 1000, 1)

        logger.info(
            "%s %s → %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            },
        )

        response.headers["X-Request-ID"] = req_id
        return response
