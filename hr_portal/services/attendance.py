from __future__ import annotations

from datetime import date, datetime
from zoneinfo import ZoneInfo

STATUS_PRESENT = "present"
STATUS_ABSENT = "absent"
STATUS_LATE = "late"


def next_attendance_status(current: str | None) -> str:
    """Flip present to absent; every other status flips to present."""

    return STATUS_ABSENT if current == STATUS_PRESENT else STATUS_PRESENT


def resolve_day(value: str | None, tz: str) -> str:
    """Validate a ``YYYY-MM-DD`` query value, falling back to today in ``tz``."""

    if value:
        try:
            return date.fromisoformat(value).isoformat()
        except ValueError:
            pass
    return datetime.now(ZoneInfo(tz)).date().isoformat()
