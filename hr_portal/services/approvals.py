from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from ..schemas.hr import APPROVAL_TABS

ACTION_STATUS = {
    "approve": "approved",
    "reject": "rejected",
}


def normalize_tab(tab: str | None) -> str:
    return tab if tab in APPROVAL_TABS else "pending"


def filter_by_tab(approvals: Iterable[Mapping[str, Any]], tab: str) -> List[Mapping[str, Any]]:
    approvals = list(approvals)
    if tab == "all":
        return approvals
    return [item for item in approvals if item.get("status") == tab]


def count_by_status(approvals: Iterable[Mapping[str, Any]]) -> dict[str, int]:
    counts = {tab: 0 for tab in APPROVAL_TABS}
    for item in approvals:
        counts["all"] += 1
        status = item.get("status")
        if status in counts:
            counts[status] += 1
    return counts
