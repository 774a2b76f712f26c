from __future__ import annotations

from typing import Any, Iterable, List, Mapping

from ..core.jinja import fmt_date

SEARCH_FIELDS = ("name", "email", "position")


def search_employees(employees: Iterable[Mapping[str, Any]], query: str | None) -> List[Mapping[str, Any]]:
    """Case-insensitive substring match on name, email and position."""

    employees = list(employees)
    needle = (query or "").strip().lower()
    if not needle:
        return employees
    return [
        emp
        for emp in employees
        if any(needle in str(emp.get(field) or "").lower() for field in SEARCH_FIELDS)
    ]


def employee_form_values(employee: Mapping[str, Any], tz: str | None = None) -> dict[str, str]:
    """Pre-fill the edit form from a backend record."""

    salary = employee.get("salary")
    return {
        "name": employee.get("name") or "",
        "email": employee.get("email") or "",
        "position": employee.get("position") or "",
        "department": employee.get("department") or "",
        "salary": "" if salary is None else str(salary),
        "joinDate": fmt_date(employee.get("joinDate"), tz=tz),
        "status": employee.get("status") or "active",
    }
