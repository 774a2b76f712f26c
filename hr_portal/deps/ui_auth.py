from __future__ import annotations

from fastapi import Depends, HTTPException, status

from ..session.store import SessionStore
from .api import get_store


async def require_ui_session(store: SessionStore = Depends(get_store)) -> SessionStore:
    """Gate for page routers; the 401 is turned into a login redirect for browsers."""

    if not store.is_authenticated():
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    return store
