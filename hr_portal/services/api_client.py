"""Async client for the HR backend REST API.

Every page goes through :class:`HRApiClient`. It attaches the session's bearer
token, decodes JSON, and turns any failure into :class:`ApiError` so callers
only ever have one exception to handle.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

import httpx

from ..core.errors import ApiError
from ..middlewares.request_id import REQUEST_ID_HEADER, current_request_id
from ..schemas.hr import (
    ApprovalDecision,
    AttendanceStatusUpdate,
    BulkGenerateRequest,
    EmployeeForm,
    KpiScoreUpdate,
    PayrollCreate,
    PayrollStatusUpdate,
)

logger = logging.getLogger(__name__)

_FILENAME_RE = re.compile(r'filename="?([^";]+)"?')


class Download:
    def __init__(self, content: bytes, media_type: str, filename: str | None) -> None:
        self.content = content
        self.media_type = media_type
        self.filename = filename


def _extract_message(response: httpx.Response) -> Optional[str]:
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        message = body.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return None


def _raise_for_status(response: httpx.Response, context: str) -> None:
    if response.is_success:
        return
    if response.status_code in {401, 403}:
        logger.warning("HR backend rejected credentials for %s", context)
    elif response.status_code >= 500:
        logger.error("HR backend error %s during %s", response.status_code, context)
    else:
        logger.warning("HR backend request error %s during %s", response.status_code, context)
    raise ApiError(_extract_message(response), status_code=response.status_code, path=context)


class HRApiClient:
    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        *,
        timeout: float = 10.0,
        retries: int = 0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if transport is None:
            # Retries cover connection failures only; answered requests are never replayed.
            transport = httpx.AsyncHTTPTransport(retries=retries)
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "HRApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        context = f"{method} {path}"
        request_id = current_request_id()
        if request_id:
            headers = dict(kwargs.pop("headers", None) or {})
            headers.setdefault(REQUEST_ID_HEADER, request_id)
            kwargs["headers"] = headers
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("HR backend unreachable during %s: %s", context, exc)
            raise ApiError(status_code=None, path=context) from exc
        _raise_for_status(response, context)
        return response

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        json: Any = None,
    ) -> Any:
        response = await self._send(method, path, params=params, json=json)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError("Unexpected response from the HR service", status_code=response.status_code, path=path) from exc

    async def download(self, path: str, *, params: Optional[Dict[str, Any]] = None) -> Download:
        response = await self._send("GET", path, params=params, headers={"Accept": "*/*"})
        disposition = response.headers.get("content-disposition", "")
        match = _FILENAME_RE.search(disposition)
        return Download(
            content=response.content,
            media_type=response.headers.get("content-type", "application/octet-stream"),
            filename=match.group(1) if match else None,
        )

    # ---- auth
    async def login(self, email: str, password: str) -> Any:
        return await self.request("POST", "/auth/login", json={"email": email, "password": password})

    # ---- dashboard
    async def dashboard_summary(self) -> Any:
        return await self.request("GET", "/dashboard/summary")

    async def payroll_trend(self) -> Any:
        return await self.request("GET", "/dashboard/payroll-trend")

    async def attendance_today(self) -> Any:
        return await self.request("GET", "/dashboard/attendance-today")

    # ---- employees
    async def list_employees(self, status: str | None = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        return await self.request("GET", "/employees", params=params) or []

    async def get_employee(self, employee_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/employees/{employee_id}")

    async def create_employee(self, form: EmployeeForm) -> Any:
        return await self.request("POST", "/employees", json=form.to_wire())

    async def update_employee(self, employee_id: str, form: EmployeeForm) -> Any:
        return await self.request("PUT", f"/employees/{employee_id}", json=form.to_wire())

    async def delete_employee(self, employee_id: str) -> Any:
        return await self.request("DELETE", f"/employees/{employee_id}")

    # ---- attendance
    async def list_attendance(self, day: str) -> List[Dict[str, Any]]:
        return await self.request("GET", "/attendance", params={"date": day}) or []

    async def attendance_summary(self, day: str) -> Any:
        return await self.request("GET", "/attendance/summary", params={"date": day})

    async def update_attendance(self, attendance_id: str, status: str) -> Any:
        body = AttendanceStatusUpdate(status=status)
        return await self.request("PUT", f"/attendance/{attendance_id}", json=body.to_wire())

    # ---- approvals
    async def list_approvals(self) -> List[Dict[str, Any]]:
        return await self.request("GET", "/approval") or []

    async def review_approval(self, approval_id: str, decision: ApprovalDecision) -> Any:
        return await self.request("PUT", f"/approval/{approval_id}", json=decision.to_wire())

    # ---- payroll
    async def list_payrolls(self) -> List[Dict[str, Any]]:
        return await self.request("GET", "/payroll") or []

    async def get_payroll(self, payroll_id: str) -> Dict[str, Any]:
        return await self.request("GET", f"/payroll/{payroll_id}")

    async def create_payroll(self, payload: PayrollCreate) -> Any:
        return await self.request("POST", "/payroll", json=payload.to_wire())

    async def update_payroll_status(self, payroll_id: str, status: str) -> Any:
        body = PayrollStatusUpdate(status=status)
        return await self.request("PUT", f"/payroll/{payroll_id}", json=body.to_wire())

    async def bulk_generate_payroll(self, payload: BulkGenerateRequest) -> Any:
        return await self.request("POST", "/payroll/bulk-generate", json=payload.to_wire())

    async def payroll_slip(self, payroll_id: str) -> Download:
        return await self.download(f"/payroll/{payroll_id}/slip")

    async def export_payroll(self) -> Download:
        return await self.download("/payroll/export")

    # ---- kpi
    async def list_kpis(self) -> List[Dict[str, Any]]:
        return await self.request("GET", "/kpi") or []

    async def update_kpi(self, kpi_id: str, score: float) -> Any:
        return await self.request("PUT", f"/kpi/{kpi_id}", json=KpiScoreUpdate(score=score).to_wire())
