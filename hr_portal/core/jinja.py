"""Jinja2 environment and the shared page renderer.

Every page goes through :func:`render_page` so the top bar (signed-in name,
initials and role) and any queued notifications appear consistently. Date
filters render in the timezone of the app that is serving the request.
"""

from __future__ import annotations

from datetime import datetime
from functools import lru_cache
from pathlib import Path
from typing import Any, Callable, Mapping
from zoneinfo import ZoneInfo

from fastapi import Request
from fastapi.templating import Jinja2Templates
from jinja2 import pass_context
from jinja2.runtime import Context

from ..services.notifications import pop_notifications
from ..services.payroll import format_amount
from ..session.store import SessionStore, initials
from .config import settings

NAV_ITEMS = (
    ("Dashboard", "/dashboard"),
    ("Employees", "/employees"),
    ("Payroll", "/payroll"),
    ("KPI", "/kpi"),
    ("Approval", "/approval"),
    ("Attendance", "/attendance"),
)


@lru_cache(maxsize=16)
def _zone(name: str | None) -> ZoneInfo | None:
    return ZoneInfo(name) if name else None


def _to_dt(value: Any, tz: str | None) -> datetime | None:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str) and value:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    zone = _zone(tz)
    if dt.tzinfo is None and zone:
        dt = dt.replace(tzinfo=zone)
    if zone:
        dt = dt.astimezone(zone)
    return dt


def fmt_dt(value: Any, fmt: str = "%Y-%m-%d %I:%M %p", *, tz: str | None = None) -> str:
    dt = _to_dt(value, tz)
    return dt.strftime(fmt) if dt else ""


def fmt_date(value: Any, fmt: str = "%Y-%m-%d", *, tz: str | None = None) -> str:
    dt = _to_dt(value, tz)
    return dt.strftime(fmt) if dt else ""


def fmt_time(value: Any, fmt: str = "%I:%M %p", *, tz: str | None = None) -> str:
    dt = _to_dt(value, tz)
    return dt.strftime(fmt) if dt else ""


def _in_request_tz(func: Callable[..., str]) -> Callable[..., str]:
    """Wrap a date filter so it picks up ``TZ`` from the rendering app's settings."""

    @pass_context
    def _filter(context: Context, value: Any, *args: Any) -> str:
        request = context.get("request")
        tz = request.app.state.settings.TZ if request is not None else settings.TZ
        return func(value, *args, tz=tz)

    return _filter


def fmt_currency(value: Any) -> str:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "$0.00"
    return f"${number:,.2f}"


@lru_cache(maxsize=4)
def get_templates(directory: Path | None = None) -> Jinja2Templates:
    """Build a ``Jinja2Templates`` instance with our filters registered."""

    templates = Jinja2Templates(directory=str(directory or settings.TEMPLATES_DIR))
    env = templates.env
    env.filters["fmt_dt"] = _in_request_tz(fmt_dt)
    env.filters["fmt_date"] = _in_request_tz(fmt_date)
    env.filters["fmt_time"] = _in_request_tz(fmt_time)
    env.filters["fmt_currency"] = fmt_currency
    env.filters["fmt_amount"] = format_amount
    env.filters["initials"] = initials
    env.globals["nav_items"] = NAV_ITEMS
    return templates


def render_page(
    request: Request,
    template: str,
    context: Mapping[str, Any] | None = None,
    *,
    status_code: int = 200,
):
    store = SessionStore.from_request(request)
    page_context: dict[str, Any] = {
        "request": request,
        "user": store.get_profile(),
        "notifications": pop_notifications(request),
        "app_name": request.app.state.settings.APP_NAME,
        "current_path": request.url.path,
    }
    page_context.update(context or {})
    templates = get_templates(request.app.state.settings.TEMPLATES_DIR)
    return templates.TemplateResponse(request, template, page_context, status_code=status_code)
