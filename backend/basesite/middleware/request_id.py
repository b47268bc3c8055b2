"""
Base Example Site — Request ID Middleware
===========================================

What:  Assigns a short ID to each incoming request, echoes it in the
       X-Request-ID response header and stamps it on every log record.
Why:   A failed Base API call is logged in results.invoke(), far from the
       access log line; the shared ID ties the two together, and the 500
       page shows it as a reference the visitor can quote.
How:   The ID lives in a ContextVar for the duration of the request.
       RequestIDLogFilter (installed by main.setup_logging) copies it onto
       each LogRecord as `request_id`, so the log format can print it.
"""

import logging
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

# Coroutine-local: concurrent requests share a thread but not this value
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# Longest caller-supplied ID we accept; anything longer is replaced
MAX_REQUEST_ID_LENGTH = 64


class RequestIDLogFilter(logging.Filter):
    """Adds `record.request_id` ("-" outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("") or "-"
        return True


def _incoming_id(request: Request) -> str:
    """A proxy in front of the site may already have assigned one."""
    rid = request.headers.get("X-Request-ID", "")
    if rid and len(rid) <= MAX_REQUEST_ID_LENGTH and rid.isprintable():
        return rid
    return uuid.uuid4().hex[:8]


class RequestIDMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = _incoming_id(request)
        # Not reset afterwards: the 500 handler runs outside this middleware
        # and still needs the ID; each request runs in its own task anyway
        request_id_var.set(rid)
        request.state.request_id = rid
        response = await call_next(request)

        response.headers["X-Request-ID"] = rid
        return response
