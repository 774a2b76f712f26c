from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, NamedTuple, Optional


class PerformanceIndicator(NamedTuple):
    label: str
    tone: str
    trend: str


EXCEEDING = PerformanceIndicator("Exceeding", "success", "up")
ON_TRACK = PerformanceIndicator("On Track", "info", "up")
NEEDS_ATTENTION = PerformanceIndicator("Needs Attention", "warning", "flat")
BELOW_TARGET = PerformanceIndicator("Below Target", "danger", "down")


def score_ratio(score: Any, target: Any) -> float:
    score = float(score or 0)
    target = float(target or 0)
    if target <= 0:
        return float("inf") if score > 0 else 0.0
    return score / target


def performance_indicator(score: Any, target: Any) -> PerformanceIndicator:
    ratio = score_ratio(score, target)
    if ratio >= 1.0:
        return EXCEEDING
    if ratio >= 0.8:
        return ON_TRACK
    if ratio >= 0.6:
        return NEEDS_ATTENTION
    return BELOW_TARGET


def progress_percent(score: Any, target: Any) -> float:
    """Width of the progress bar, capped at 100."""

    return min(score_ratio(score, target) * 100, 100.0)


def parse_score(value: Any) -> Optional[float]:
    """Read a submitted score; ``None`` when it is blank, not a number or negative."""

    text = "" if value is None else str(value).strip()
    if not text:
        return None
    try:
        score = Decimal(text)
    except InvalidOperation:
        return None
    if not score.is_finite() or score < 0:
        return None
    return float(score)
