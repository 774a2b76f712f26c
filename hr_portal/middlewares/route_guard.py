from __future__ import annotations

import logging
from typing import Iterable
from urllib.parse import urlencode

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response

from ..session.store import SessionStore
from .request_id import principal_ctx_var

logger = logging.getLogger("hr_portal.guard")


def path_is_guarded(path: str, prefixes: Iterable[str], login_path: str) -> bool:
    """Only the dashboard sections and the login page itself are intercepted."""

    if path == login_path:
        return True
    for prefix in prefixes:
        prefix = prefix.rstrip("/")
        if path == prefix or path.startswith(prefix + "/"):
            return True
    return False


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Redirect based on the signed session before a page handler runs.

    Must sit inside ``SessionMiddleware`` so ``request.session`` is populated.
    """

    def __init__(
        self,
        app,  # type: ignore[no-untyped-def]
        *,
        login_path: str = "/login",
        dashboard_path: str = "/dashboard",
        public_root: str = "/",
        protected_prefixes: Iterable[str] = (),
    ) -> None:
        super().__init__(app)
        self.login_path = login_path
        self.dashboard_path = dashboard_path
        self.public_root = public_root
        self.protected_prefixes = tuple(protected_prefixes)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not path_is_guarded(path, self.protected_prefixes, self.login_path):
            return await call_next(request)

        store = SessionStore.from_request(request)
        authenticated = store.is_authenticated()
        if not authenticated and store.get_token():
            # Expired or tampered token: forget it so the cookie goes away too.
            store.clear()

        if path == self.login_path and authenticated:
            return RedirectResponse(url=self.dashboard_path, status_code=307)

        if path not in (self.login_path, self.public_root) and not authenticated:
            logger.info("guard.redirect_login", extra={"extra_data": {"path": path}})
            target = self.login_path
            if request.method == "GET":
                target = f"{self.login_path}?{urlencode({'next': path})}"
            return RedirectResponse(url=target, status_code=307)

        profile = store.get_profile()
        if profile is not None:
            request.state.principal = profile.email
            principal_ctx_var.set(profile.email)
        return await call_next(request)
