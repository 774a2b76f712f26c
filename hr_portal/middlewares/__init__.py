from __future__ import annotations

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .route_guard import RouteGuardMiddleware, path_is_guarded

__all__ = [
    "RequestIdMiddleware",
    "RouteGuardMiddleware",
    "path_is_guarded",
    "principal_ctx_var",
    "request_id_ctx_var",
]
