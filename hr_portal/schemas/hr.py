"""Payloads this portal sends to the HR backend.

Records coming back from the backend are rendered exactly as received, so only
the outgoing bodies are modelled here. Field names follow the backend's
camelCase wire format through aliases.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

EMPLOYEE_STATUSES = ("active", "inactive", "on_leave")
APPROVAL_TABS = ("pending", "approved", "rejected", "all")


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json", exclude_none=True)


class EmployeeForm(WireModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    position: str = ""
    department: str = ""
    salary: float = Field(..., ge=0)
    join_date: Optional[date] = Field(default=None, alias="joinDate")
    status: str = "active"


class PayrollCreate(WireModel):
    employee_id: str = Field(..., min_length=1, alias="employeeId")
    period: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    basic_salary: float = Field(..., ge=0, alias="basicSalary")
    bonuses: float = Field(default=0, ge=0)
    deductions: float = Field(default=0, ge=0)


class PayrollStatusUpdate(WireModel):
    status: str


class BulkGenerateRequest(WireModel):
    employee_ids: list[str] = Field(..., min_length=1, alias="employeeIds")
    period: str = Field(..., pattern=r"^\d{4}-\d{2}$")


class KpiScoreUpdate(WireModel):
    score: float


class ApprovalDecision(WireModel):
    status: Literal["approved", "rejected"]
    reviewer_notes: str = Field(default="", alias="reviewerNotes")


class AttendanceStatusUpdate(WireModel):
    status: str
