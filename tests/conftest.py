"""Shared fixtures: a fake HR backend behind ``httpx.MockTransport`` and a portal wired to it."""

import json
import sys
from copy import deepcopy
from pathlib import Path
from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from hr_portal import create_app
from hr_portal.core.config import AppSettings

BACKEND_URL = "http://backend.test/api"
VALID_PASSWORD = "secret"
BACKEND_TOKEN = "opaque-token-123"

USER = {"id": "u1", "email": "jane.doe@example.com", "name": "Jane Doe", "role": "HR Manager"}

EMPLOYEES = [
    {"id": "e1", "name": "Alice Martin", "email": "alice@example.com", "position": "Engineer",
     "department": "R&D", "status": "active", "salary": 5000, "joinDate": "2023-02-01T00:00:00Z"},
    {"id": "e2", "name": "Bob Stone", "email": "bob@example.com", "position": "Accountant",
     "department": "Finance", "status": "inactive", "salary": 4200, "joinDate": "2021-07-15"},
]

APPROVALS = [
    {"id": "ap1", "employeeName": "Carla Pending", "type": "leave", "reason": "Vacation",
     "startDate": "2024-06-01", "endDate": "2024-06-05", "status": "pending",
     "submittedAt": "2024-05-20T09:00:00Z", "reviewedAt": None, "reviewerNotes": None},
    {"id": "ap2", "employeeName": "Dan Done", "type": "leave", "reason": "Medical",
     "startDate": "2024-04-01", "endDate": "2024-04-02", "status": "approved",
     "submittedAt": "2024-03-20T09:00:00Z", "reviewedAt": "2024-03-21T09:00:00Z", "reviewerNotes": "ok"},
]

ATTENDANCE = [
    {"id": "a1", "employeeName": "Alice Martin", "date": "2024-05-02", "status": "present",
     "checkIn": "2024-05-02T09:00:00Z", "checkOut": None},
    {"id": "a2", "employeeName": "Bob Stone", "date": "2024-05-02", "status": "absent",
     "checkIn": None, "checkOut": None},
]

PAYROLLS = [
    {"id": "p1", "employeeId": "e1", "employeeName": "Alice Martin", "employeeEmail": "alice@example.com",
     "period": "2024-04", "basicSalary": 5000, "bonuses": 200, "deductions": 150, "netSalary": 5050,
     "status": "pending", "paymentDate": None, "createdAt": "2024-04-30T10:00:00Z"},
    {"id": "p2", "employeeId": "e2", "employeeName": "Bob Stone", "employeeEmail": "bob@example.com",
     "period": "2024-04", "basicSalary": 4200, "bonuses": 0, "deductions": 0, "netSalary": 4200,
     "status": "paid", "paymentDate": "2024-05-01", "createdAt": "2024-04-30T10:00:00Z"},
]

KPIS = [
    {"id": "k1", "employeeId": "e1", "employeeName": "Alice Martin", "score": 95, "target": 100,
     "period": "2024-Q2", "lastUpdated": "2024-05-01"},
]


class FakeBackend:
    """Minimal stateful stand-in for the HR REST backend."""

    def __init__(self, token: str = BACKEND_TOKEN) -> None:
        self.token = token
        self.calls: list[httpx.Request] = []
        self.failing: set[tuple[str, str]] = set()
        self.error_messages: dict[tuple[str, str], str] = {}
        self.hooks: dict[tuple[str, str], Callable[[httpx.Request], None]] = {}
        self.employees = deepcopy(EMPLOYEES)
        self.approvals = deepcopy(APPROVALS)
        self.attendance = deepcopy(ATTENDANCE)
        self.payrolls = deepcopy(PAYROLLS)
        self.kpis = deepcopy(KPIS)

    def fail(self, method: str, path: str, *, status: int = 500, message: str | None = None) -> None:
        self.failing.add((method, path))
        if message:
            self.error_messages[(method, path)] = message
        self._fail_status = status

    def sent(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.calls if r.method == method and self._path(r) == path]

    def last_json(self, method: str, path: str):
        return json.loads(self.sent(method, path)[-1].content)

    @staticmethod
    def _path(request: httpx.Request) -> str:
        return request.url.path.removeprefix("/api")

    @staticmethod
    def _find(records, record_id):
        return next((r for r in records if r["id"] == record_id), None)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        method, path = request.method, self._path(request)
        hook = self.hooks.get((method, path))
        if hook is not None:
            hook(request)
        if (method, path) in self.failing:
            message = self.error_messages.get((method, path))
            body = {"message": message} if message else {"error": "boom"}
            return httpx.Response(getattr(self, "_fail_status", 500), json=body)

        if (method, path) == ("POST", "/auth/login"):
            payload = json.loads(request.content)
            if payload.get("password") != VALID_PASSWORD:
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return httpx.Response(200, json={"token": self.token, "user": USER})

        if request.headers.get("authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"message": "Unauthorized"})

        parts = path.strip("/").split("/")
        body = json.loads(request.content) if request.content else None

        if parts[0] == "dashboard":
            data = {
                "summary": {"totalEmployees": 2, "activeEmployees": 1, "totalPayroll": 9250,
                            "averageKPI": 87, "attendanceRate": 50},
                "payroll-trend": [{"month": "Mar", "amount": 9000}, {"month": "Apr", "amount": 9250}],
                "attendance-today": {"present": 1, "absent": 1, "total": 2},
            }
            return httpx.Response(200, json=data[parts[1]])

        if parts[0] == "employees":
            if len(parts) == 1 and method == "GET":
                status = request.url.params.get("status")
                rows = [e for e in self.employees if not status or e["status"] == status]
                return httpx.Response(200, json=rows)
            if len(parts) == 1 and method == "POST":
                record = dict(body, id=f"e{len(self.employees) + 1}")
                self.employees.append(record)
                return httpx.Response(201, json=record)
            record = self._find(self.employees, parts[1])
            if record is None:
                return httpx.Response(404, json={"message": "Employee not found"})
            if method == "GET":
                return httpx.Response(200, json=record)
            if method == "PUT":
                record.update(body)
                return httpx.Response(200, json=record)
            if method == "DELETE":
                self.employees.remove(record)
                return httpx.Response(204)

        if parts[0] == "attendance":
            if len(parts) == 1:
                return httpx.Response(200, json=self.attendance)
            if parts[1] == "summary":
                present = sum(1 for a in self.attendance if a["status"] == "present")
                return httpx.Response(200, json={"totalEmployees": len(self.attendance), "present": present,
                                                 "absent": len(self.attendance) - present, "late": 0, "rate": 50})
            record = self._find(self.attendance, parts[1])
            record.update(body)
            return httpx.Response(200, json=record)

        if parts[0] == "approval":
            if len(parts) == 1:
                return httpx.Response(200, json=self.approvals)
            record = self._find(self.approvals, parts[1])
            record.update(body)
            return httpx.Response(200, json=record)

        if parts[0] == "payroll":
            if len(parts) == 1 and method == "GET":
                return httpx.Response(200, json=self.payrolls)
            if len(parts) == 1 and method == "POST":
                return httpx.Response(201, json=dict(body, id="p3"))
            if parts[1] == "export":
                return httpx.Response(200, content=b"id,employee\np1,Alice\n", headers={"content-type": "text/csv"})
            if parts[1] == "bulk-generate":
                return httpx.Response(201, json={"created": len(body["employeeIds"])})
            record = self._find(self.payrolls, parts[1])
            if len(parts) == 3 and parts[2] == "slip":
                return httpx.Response(200, content=b"%PDF-1.4 slip", headers={"content-type": "application/pdf"})
            if method == "PUT":
                record.update(body)
            return httpx.Response(200, json=record)

        if parts[0] == "kpi":
            if len(parts) == 1:
                return httpx.Response(200, json=self.kpis)
            record = self._find(self.kpis, parts[1])
            record.update(body)
            return httpx.Response(200, json=record)

        return httpx.Response(404, json={"message": "Not found"})


@pytest.fixture()
def backend():
    return FakeBackend()


@pytest.fixture()
def settings():
    return AppSettings(API_BASE_URL=BACKEND_URL, APP_SECRET="test-secret", TZ="UTC", API_RETRIES=0)


@pytest.fixture()
def client(backend, settings):
    app = create_app(settings, transport=httpx.MockTransport(backend))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def logged_in(client):
    response = client.post(
        "/login",
        data={"email": USER["email"], "password": VALID_PASSWORD},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
