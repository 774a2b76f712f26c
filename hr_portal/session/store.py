"""Token/profile store backed by the signed browser session.

The backend token and the cached user profile both live in the one session
cookie that Starlette's ``SessionMiddleware`` signs. The route guard and the
pages therefore read the same source when deciding whether someone is signed
in, and logging out removes both values in one go.

Outside a request (for example in a background task or a shell) the store has
no session to talk to: reads return ``None`` and writes do nothing.
"""

from __future__ import annotations

import logging
from typing import Any, MutableMapping

from fastapi.responses import RedirectResponse
from pydantic import ValidationError
from starlette.requests import HTTPConnection

from ..core.security import token_is_valid
from ..schemas.auth import UserProfile

TOKEN_KEY = "auth_token"
PROFILE_KEY = "user_data"

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(
        self,
        session: MutableMapping[str, Any] | None,
        *,
        jwt_secret: str = "",
        jwt_algorithms: list[str] | None = None,
        login_path: str = "/login",
    ) -> None:
        self._session = session
        self._jwt_secret = jwt_secret
        self._jwt_algorithms = jwt_algorithms
        self._login_path = login_path

    @classmethod
    def from_request(cls, request: HTTPConnection | None) -> "SessionStore":
        if request is None:
            return cls(None)
        session = request.session if "session" in request.scope else None
        settings = getattr(request.app.state, "settings", None) if "app" in request.scope else None
        if settings is None:
            return cls(session)
        return cls(
            session,
            jwt_secret=settings.API_JWT_SECRET,
            jwt_algorithms=settings.API_JWT_ALGORITHMS,
            login_path=settings.LOGIN_PATH,
        )

    @property
    def available(self) -> bool:
        return self._session is not None

    def set_token(self, value: str) -> None:
        if self._session is None:
            return
        self._session[TOKEN_KEY] = value

    def get_token(self) -> str | None:
        if self._session is None:
            return None
        token = self._session.get(TOKEN_KEY)
        return token if isinstance(token, str) and token else None

    def set_profile(self, user: UserProfile) -> None:
        if self._session is None:
            return
        self._session[PROFILE_KEY] = user.model_dump_json()

    def get_profile(self) -> UserProfile | None:
        if self._session is None:
            return None
        raw = self._session.get(PROFILE_KEY)
        if not raw:
            return None
        try:
            return UserProfile.model_validate_json(raw)
        except (ValidationError, TypeError, ValueError):
            logger.warning("Discarding malformed profile stored in session")
            return None

    def clear(self) -> None:
        if self._session is None:
            return
        self._session.pop(TOKEN_KEY, None)
        self._session.pop(PROFILE_KEY, None)

    def is_authenticated(self) -> bool:
        return token_is_valid(
            self.get_token(),
            secret=self._jwt_secret,
            algorithms=self._jwt_algorithms,
        )

    def logout(self) -> RedirectResponse:
        """Drop the session and send the browser to a fresh login page."""

        self.clear()
        if self._session is not None:
            # Anything else cached for the page (filters, flashes) goes too.
            self._session.clear()
        return RedirectResponse(url=self._login_path, status_code=303)


def initials(name: str | None) -> str:
    if not name:
        return ""
    return "".join(part[0] for part in name.split() if part).upper()[:2]
