from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Iterable, List, Mapping

PAYROLL_STATUS_FILTERS = ("all", "pending", "processed", "paid")


def parse_amount(value: Any) -> Decimal:
    """Read a form amount; blank or unparseable input counts as zero."""

    if value is None:
        return Decimal("0")
    text = str(value).strip()
    if not text:
        return Decimal("0")
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return Decimal("0")
    if not amount.is_finite():
        return Decimal("0")
    return amount


def net_salary(basic_salary: Any, bonuses: Any = None, deductions: Any = None) -> Decimal:
    return parse_amount(basic_salary) + parse_amount(bonuses) - parse_amount(deductions)


def format_amount(value: Any) -> str:
    """``5050`` stays ``5050``; fractional amounts keep two decimals."""

    amount = value if isinstance(value, Decimal) else parse_amount(value)
    if amount == amount.to_integral_value():
        return str(int(amount))
    return f"{amount:.2f}"


def filter_by_status(records: Iterable[Mapping[str, Any]], status: str) -> List[Mapping[str, Any]]:
    records = list(records)
    if not status or status == "all":
        return records
    return [record for record in records if record.get("status") == status]
