from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..services.notifications import notify

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Any failed call to the HR backend: a non-2xx answer or a transport error.

    Failures are deliberately not split by status code. ``message`` carries the
    backend's own ``message`` field when it sent one so forms can show it.
    """

    def __init__(self, message: str | None = None, *, status_code: int | None = None, path: str = "") -> None:
        super().__init__(message or f"Backend request failed ({status_code or 'transport error'})")
        self.message = message
        self.status_code = status_code
        self.path = path

    def user_message(self, fallback: str) -> str:
        return self.message or fallback


class ErrorEnvelope(JSONResponse):
    def __init__(
        self,
        *,
        status_code: int,
        code: str,
        message: str,
        details: Any | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        payload: dict[str, Any] = {"code": code, "message": message}
        if details is not None:
            payload["details"] = details
        super().__init__(payload, status_code=status_code, headers=headers)


def _wants_html(request: Request) -> bool:
    return "text/html" in (request.headers.get("accept") or "").lower()


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    settings = request.app.state.settings
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        if _wants_html(request) and not request.url.path.startswith(settings.LOGIN_PATH):
            target = f"{settings.LOGIN_PATH}?{urlencode({'next': request.url.path})}"
            return RedirectResponse(url=target, status_code=302)
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Error"
    details = detail if isinstance(detail, dict) else None
    return ErrorEnvelope(
        status_code=exc.status_code,
        code="http_error",
        message=message,
        details=details,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return ErrorEnvelope(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code="validation_error",
        message="Validation failed",
        details={"errors": exc.errors()},
    )


async def api_error_handler(request: Request, exc: ApiError):
    """Last resort for backend failures a page did not handle itself."""

    logger.error("Unhandled backend failure on %s: %s", request.url.path, exc)
    dashboard = request.app.state.settings.DASHBOARD_PATH
    if _wants_html(request) and request.url.path != dashboard:
        notify(request, exc.user_message("The HR service is unavailable"), level="error")
        return RedirectResponse(url=dashboard, status_code=303)
    return ErrorEnvelope(
        status_code=status.HTTP_502_BAD_GATEWAY,
        code="upstream_error",
        message=exc.user_message("The HR service is unavailable"),
    )
