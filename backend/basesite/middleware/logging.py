"""
Base Example Site — Request Logging Middleware
================================================

What:  One access-log line per request: method, path, route name, status,
       duration and who was signed in when the response left.
Why:   Most pages answer with a 303 whose target tells what happened
       (e.g. a failed lookup bouncing to /users); the access log is where
       that flow is visible, together with the session change it caused
       (login → user=u-1, logout → user=-).
How:   Runs inside SessionMiddleware, so request.scope["session"] already
       holds the dispatcher's update when the response comes back. The
       router stores the matched endpoint in the scope; its name is the
       RouteSpec name.

Log line:
    POST /login [login] 303 12.3ms user=u-1 rid=1a2b3c4d from 127.0.0.1

What we DON'T log: form bodies (passwords!), query strings, cookies.
"""

import logging
import time
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from basesite.middleware.request_id import request_id_var
from basesite.session import USER_ID_KEY

logger = logging.getLogger("basesite.access")

# Probes hit these every few seconds
QUIET_PATHS = frozenset({"/health"})


def _route_name(request: Request) -> str:
    endpoint = request.scope.get("endpoint")
    return getattr(endpoint, "__name__", "-").replace("_", "-")


def _signed_in_user(request: Request) -> Optional[str]:
    session = request.scope.get("session") or {}
    return session.get(USER_ID_KEY)


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        route = _route_name(request)
        user_id = _signed_in_user(request)
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            _level_for(response.status_code),
            "%s %s [%s] %d %.1fms user=%s rid=%s from %s",
            request.method,
            path,
            route,
            response.status_code,
            duration_ms,
            user_id or "-",
            rid,
            client_ip,
            extra={
                "route": route,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                "user_id": user_id,
            },
        )
        return response
