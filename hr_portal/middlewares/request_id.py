from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from typing import Iterable
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

REQUEST_ID_HEADER = "X-Request-ID"

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal", default=None)
logger = logging.getLogger("hr_portal.request")


def current_request_id() -> str | None:
    """Id of the portal request being served; forwarded on backend calls."""

    return request_id_ctx_var.get()


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each portal request with a correlation id and write one access line.

    Asset and health-check hits are logged at DEBUG so page views stand out.
    """

    def __init__(
        self,
        app,  # type: ignore[no-untyped-def]
        header_name: str = REQUEST_ID_HEADER,
        quiet_prefixes: Iterable[str] = ("/static", "/health", "/metrics"),
    ) -> None:
        super().__init__(app)
        self.header_name = header_name
        self.quiet_prefixes = tuple(quiet_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or uuid4().hex
        token = request_id_ctx_var.set(request_id)
        principal_token = principal_ctx_var.set(None)
        request.state.request_id = request_id
        start = time.perf_counter()
        try:
            response = await call_next(request)
            # Set by the route guard or the login handler once the user is known.
            principal = getattr(request.state, "principal", None)
        finally:
            request_id_ctx_var.reset(token)
            principal_ctx_var.reset(principal_token)

        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        response.headers[self.header_name] = request_id
        fields = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
        }
        if principal:
            fields["user"] = principal
        if response.status_code in (301, 302, 303, 307, 308):
            fields["location"] = response.headers.get("location")

        path = request.url.path
        if path.startswith(self.quiet_prefixes):
            level = logging.DEBUG
        elif response.status_code >= 500:
            level = logging.ERROR
        else:
            level = logging.INFO
        logger.log(level, "request.completed", extra={"extra_data": fields})
        return response
