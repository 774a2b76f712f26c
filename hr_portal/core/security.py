"""Checks applied to the backend token held in the browser session.

The backend token is opaque to us. When it happens to be a JWT we still honour
its ``exp`` claim, and when ``API_JWT_SECRET`` is configured we verify its
signature as well. Anything that is not a JWT is accepted as-is.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

logger = logging.getLogger(__name__)


def _looks_like_jwt(token: str) -> bool:
    return token.count(".") == 2


def _now() -> datetime:
    return datetime.now(tz=timezone.utc)


def read_claims(token: str, *, secret: str = "", algorithms: list[str] | None = None) -> dict[str, Any] | None:
    """Return the token's claims, ``{}`` for opaque tokens, ``None`` when invalid."""

    if not token:
        return None
    if not _looks_like_jwt(token):
        return {}
    try:
        if secret:
            return jwt.decode(
                token,
                secret,
                algorithms=algorithms or ["HS256"],
                options={"verify_aud": False},
            )
        claims = jwt.get_unverified_claims(token)
    except ExpiredSignatureError:
        logger.info("Session token expired")
        return None
    except JWTError:
        logger.warning("Session token rejected")
        return None

    exp = claims.get("exp")
    if isinstance(exp, (int, float)) and exp <= _now().timestamp():
        logger.info("Session token expired")
        return None
    return claims


def token_is_valid(token: str | None, *, secret: str = "", algorithms: list[str] | None = None) -> bool:
    if not token:
        return False
    return read_claims(token, secret=secret, algorithms=algorithms) is not None
