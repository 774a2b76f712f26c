"""Application factory and top-level wiring for the HR portal.

The portal is a server-rendered dashboard in front of the HR REST backend.
This module ties together configuration, the signed session, the route guard,
templates, page routers and error handling.
"""

from __future__ import annotations

import httpx
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .core.config import AppSettings, get_settings
from .core.errors import ApiError, api_error_handler, http_exception_handler, validation_exception_handler
from .middlewares import RequestIdMiddleware, RouteGuardMiddleware
from .routers import approval, attendance, auth_ui, dashboard, employees, kpi, payroll
from .services.resources import FetchSequencer


def create_app(
    settings: AppSettings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the portal. ``transport`` replaces the network stack for the backend client."""

    settings = settings or get_settings()
    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings
    app.state.api_transport = transport
    app.state.fetch_sequencer = FetchSequencer()

    app.mount("/static", StaticFiles(directory=str(settings.STATIC_DIR)), name="static")

    # Middleware added last runs first: request id -> session -> guard -> routes.
    app.add_middleware(
        RouteGuardMiddleware,
        login_path=settings.LOGIN_PATH,
        dashboard_path=settings.DASHBOARD_PATH,
        protected_prefixes=settings.PROTECTED_PREFIXES,
    )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.APP_SECRET,
        session_cookie=settings.SESSION_COOKIE_NAME,
        max_age=settings.SESSION_MAX_AGE,
        same_site="lax",
        https_only=settings.SESSION_HTTPS_ONLY,
    )
    app.add_middleware(RequestIdMiddleware)

    app.include_router(auth_ui.router)
    app.include_router(dashboard.router)
    app.include_router(employees.router)
    app.include_router(payroll.router)
    app.include_router(kpi.router)
    app.include_router(approval.router)
    app.include_router(attendance.router)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, bool]:
        return {"ok": True}

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ApiError, api_error_handler)
    return app


__all__ = ["create_app"]
