"""Request correlation.

Every request gets a trace id: the caller's `X-Trace-Id` when it is a sane
token, a fresh UUID otherwise. The id is

- bound into structlog's context, so every log line emitted while the
  request runs carries `trace_id`
- stored on `request.state.trace_id` for the exception handlers, which run
  after the context has been cleared
- echoed back in the `X-Trace-Id` response header
"""

import re
from contextvars import ContextVar
from typing import Awaitable, Callable
from uuid import uuid4

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

TRACE_HEADER = "X-Trace-Id"

_ACCEPTED_TRACE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

trace_id_context: ContextVar[str | None] = ContextVar("trace_id", default=None)


def get_trace_id() -> str | None:
    """Trace id of the request being handled, or None outside a request."""
    return trace_id_context.get()


def resolve_trace_id(incoming: str | None) -> str:
    """Adopt the caller's trace id if it is safe to log and echo."""
    if incoming and _ACCEPTED_TRACE_ID.match(incoming):
        return incoming
    return str(uuid4())


class TraceMiddleware(BaseHTTPMiddleware):
    """Assigns and propagates a trace id per request."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        trace_id = resolve_trace_id(request.headers.get(TRACE_HEADER))
        token = trace_id_context.set(trace_id)
        request.state.trace_id = trace_id
        structlog.contextvars.bind_contextvars(trace_id=trace_id)
        try:
            response = await call_next(request)
        finally:
            structlog.contextvars.unbind_contextvars("trace_id")
            trace_id_context.reset(token)
        response.headers[TRACE_HEADER] = trace_id
        return response
