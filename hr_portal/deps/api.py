from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, Request

from ..services.api_client import HRApiClient
from ..session.store import SessionStore


def get_store(request: Request) -> SessionStore:
    return SessionStore.from_request(request)


def build_api_client(request: Request, token: str | None) -> HRApiClient:
    settings = request.app.state.settings
    return HRApiClient(
        settings.API_BASE_URL,
        token,
        timeout=settings.API_TIMEOUT,
        retries=settings.API_RETRIES,
        transport=getattr(request.app.state, "api_transport", None),
    )


async def get_api_client(request: Request, store: SessionStore = Depends(get_store)) -> AsyncIterator[HRApiClient]:
    """One backend client per request, carrying the session's bearer token."""

    client = build_api_client(request, store.get_token())
    try:
        yield client
    finally:
        await client.aclose()
