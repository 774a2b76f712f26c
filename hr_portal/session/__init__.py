from __future__ import annotations

from .store import PROFILE_KEY, TOKEN_KEY, SessionStore, initials

__all__ = ["PROFILE_KEY", "TOKEN_KEY", "SessionStore", "initials"]
