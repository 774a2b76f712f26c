from __future__ import annotations

from .api import build_api_client, get_api_client, get_store
from .ui_auth import require_ui_session

__all__ = ["build_api_client", "get_api_client", "get_store", "require_ui_session"]
