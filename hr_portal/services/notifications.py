"""Toast-style notifications flashed through the session.

A page queues a notification while handling a request and the next rendered
page pops and shows it. Success and error are the only levels the UI styles.
"""

from __future__ import annotations

from typing import Any

from starlette.requests import HTTPConnection

NOTIFICATIONS_KEY = "notifications"

LEVEL_TITLES = {
    "success": "Success",
    "error": "Error",
}


def notify(request: HTTPConnection, message: str, *, level: str = "success", title: str | None = None) -> None:
    if "session" not in request.scope:
        return
    queue = list(request.session.get(NOTIFICATIONS_KEY) or [])
    queue.append(
        {
            "level": level,
            "title": title or LEVEL_TITLES.get(level, level.title()),
            "message": message,
        }
    )
    request.session[NOTIFICATIONS_KEY] = queue


def pop_notifications(request: HTTPConnection) -> list[dict[str, Any]]:
    if "session" not in request.scope:
        return []
    return list(request.session.pop(NOTIFICATIONS_KEY, None) or [])
