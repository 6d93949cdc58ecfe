"""Request ID, trace context and access logging middleware."""

import logging
import re
import time
import uuid
from typing import Callable, Optional

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .observability import metrics_collector


logger = logging.getLogger(__name__)

TRACEPARENT_PATTERN = re.compile(r"^00-([0-9a-f]{32})-([0-9a-f]{16})-([0-9a-f]{2})$")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Tags each request with an ID taken from X-Request-ID or generated.

    The ID is stored on ``request.state``, bound into the structlog
    context for the duration of the request and echoed in the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.header_name) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.bind_contextvars(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("request_id")
        response.headers[self.header_name] = request_id
        return response


def parse_traceparent(traceparent: str) -> Optional[dict]:
    """Parse a W3C traceparent header, returning None for invalid values."""
    match = TRACEPARENT_PATTERN.match(traceparent.strip().lower())
    if not match:
        return None

    trace_id, parent_id, flags = match.groups()
    if trace_id == "0" * 32 or parent_id == "0" * 16:
        return None

    return {"trace_id": trace_id, "parent_id": parent_id, "flags": flags}


class TraceContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that continues or starts a W3C Trace Context.

    https://www.w3.org/TR/trace-context/
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        incoming = parse_traceparent(request.headers.get("traceparent", ""))
        tracestate = request.headers.get("tracestate")

        trace_id = incoming["trace_id"] if incoming else uuid.uuid4().hex
        flags = incoming["flags"] if incoming else "01"
        span_id = uuid.uuid4().hex[:16]

        request.state.trace_context = {
            "trace_id": trace_id,
            "span_id": span_id,
            "parent_span_id": incoming["parent_id"] if incoming else None,
            "flags": flags,
        }

        response = await call_next(request)

        response.headers["traceparent"] = f"00-{trace_id}-{span_id}-{flags}"
        if tracestate:
            response.headers["tracestate"] = tracestate
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with timing and records request metrics."""

    def __init__(self, app: ASGIApp, skip_paths: Optional[list] = None):
        super().__init__(app)
        self.skip_paths = skip_paths or ["/health", "/ready", "/metrics", "/favicon.ico"]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in self.skip_paths:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - start_time

        trace_context = getattr(request.state, "trace_context", {})
        log_data = {
            "request_id": getattr(request.state, "request_id", "unknown"),
            "trace_id": trace_context.get("trace_id", "unknown"),
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration * 1000, 2),
        }

        metrics_collector.record_request(
            request.method, request.url.path, response.status_code, duration
        )

        if response.status_code >= 500:
            logger.error("HTTP request completed with server error", extra=log_data)
        elif response.status_code >= 400:
            logger.warning("HTTP request completed with client error", extra=log_data)
        else:
            logger.info("HTTP request completed", extra=log_data)

        return response


def setup_middleware(app, enable_logging: bool = True) -> None:
    """
    Setup all middleware on the FastAPI app.

    Middleware added last runs first, so the request ID is assigned
    before trace context and logging see the request.
    """
    if enable_logging:
        app.add_middleware(LoggingMiddleware)

    app.add_middleware(TraceContextMiddleware)
    app.add_middleware(RequestIDMiddleware)
