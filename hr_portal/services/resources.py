"""Shared fetch/notify/loading convention used by every page.

``load_view`` runs a page's requests concurrently and treats them as one unit:
either every response lands in the view state or none does and the user gets
the page's failure notification. ``run_mutation`` does the same for a single
create/update/delete. ``FetchSequencer`` lets a view drop responses that were
overtaken by a newer request for the same view.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Dict, Mapping, Optional

from starlette.requests import HTTPConnection

from ..core.errors import ApiError
from .notifications import notify

logger = logging.getLogger(__name__)


@dataclass
class ViewState:
    data: Dict[str, Any] = field(default_factory=dict)
    loading: bool = True
    failed: bool = False
    stale: bool = False

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)


class FetchSequencer:
    """Hands out increasing tickets per view key; only the newest one is current."""

    def __init__(self) -> None:
        self._counter = itertools.count(1)
        self._latest: Dict[str, int] = {}
        self._lock = threading.Lock()

    def begin(self, key: str) -> int:
        with self._lock:
            seq = next(self._counter)
            self._latest[key] = seq
            return seq

    def is_current(self, key: str, seq: int) -> bool:
        with self._lock:
            return self._latest.get(key) == seq


async def load_view(
    request: HTTPConnection,
    fetchers: Mapping[str, Awaitable[Any]],
    *,
    failure: str,
    initial: Optional[Dict[str, Any]] = None,
    sequencer: Optional[FetchSequencer] = None,
    key: Optional[str] = None,
) -> ViewState:
    """Fetch every named resource concurrently and build the page state.

    ``initial`` holds the values shown when loading fails (empty lists and the
    like). When ``sequencer`` and ``key`` are given, a result that is no longer
    the newest for ``key`` comes back with ``stale`` set and no data.
    """

    state = ViewState(data=dict(initial or {}))
    seq = sequencer.begin(key) if sequencer is not None and key else None
    names = list(fetchers)
    # Every fetch is awaited to completion so none outlives the request's client.
    results = await asyncio.gather(*(fetchers[name] for name in names), return_exceptions=True)
    state.loading = False

    errors = [result for result in results if isinstance(result, BaseException)]
    for error in errors:
        if not isinstance(error, ApiError):
            raise error
    if errors:
        logger.warning("view.load_failed", extra={"extra_data": {"resources": names, "error": str(errors[0])}})
        notify(request, failure, level="error")
        state.failed = True
        return state

    if seq is not None and not sequencer.is_current(key, seq):  # type: ignore[union-attr]
        logger.info("view.stale_response", extra={"extra_data": {"key": key, "seq": seq}})
        state.stale = True
        return state

    state.data.update(zip(names, results))
    return state


async def run_mutation(
    request: HTTPConnection,
    action: Awaitable[Any],
    *,
    success: str,
    failure: str,
    server_message: bool = False,
) -> bool:
    """Run one create/update/delete and flash the outcome. Returns ``True`` on success."""

    try:
        await action
    except ApiError as exc:
        logger.warning("view.mutation_failed", extra={"extra_data": {"error": str(exc)}})
        notify(request, exc.user_message(failure) if server_message else failure, level="error")
        return False
    notify(request, success, level="success")
    return True
