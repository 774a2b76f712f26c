from __future__ import annotations

import time

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from pydantic import ValidationError

from ..core.errors import ApiError
from ..core.jinja import render_page
from ..deps.api import get_api_client
from ..deps.ui_auth import require_ui_session
from ..schemas.hr import BulkGenerateRequest, PayrollCreate
from ..services.api_client import Download, HRApiClient
from ..services.notifications import notify
from ..services.payroll import PAYROLL_STATUS_FILTERS, filter_by_status, net_salary, parse_amount
from ..services.resources import load_view, run_mutation

router = APIRouter(prefix="/payroll", dependencies=[Depends(require_ui_session)])


def _attachment(download: Download, filename: str) -> Response:
    return Response(
        content=download.content,
        media_type=download.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_class=HTMLResponse)
async def payroll_page(request: Request, status: str = "all", api: HRApiClient = Depends(get_api_client)):
    status = status if status in PAYROLL_STATUS_FILTERS else "all"
    view = await load_view(
        request,
        {"payrolls": api.list_payrolls()},
        failure="Failed to load payroll records",
        initial={"payrolls": []},
    )
    context = {
        "view": view,
        "payrolls": filter_by_status(view.get("payrolls", []), status),
        "status": status,
        "statuses": PAYROLL_STATUS_FILTERS,
    }
    return render_page(request, "payroll/list.html", context)


@router.get("/export")
async def export_payroll(request: Request, api: HRApiClient = Depends(get_api_client)):
    try:
        download = await api.export_payroll()
    except ApiError:
        notify(request, "Failed to export payroll", level="error")
        return RedirectResponse(url="/payroll", status_code=303)
    return _attachment(download, f"payroll_export_{int(time.time() * 1000)}.csv")


@router.get("/create", response_class=HTMLResponse)
async def create_payroll_page(
    request: Request,
    employeeId: str = "",
    period: str = "",
    basicSalary: str = "",
    bonuses: str = "",
    deductions: str = "",
    api: HRApiClient = Depends(get_api_client),
):
    form = {
        "employeeId": employeeId,
        "period": period,
        "basicSalary": basicSalary,
        "bonuses": bonuses,
        "deductions": deductions,
    }
    return await _create_form(request, api, form)


async def _create_form(request: Request, api: HRApiClient, form: dict[str, str], status_code: int = 200):
    view = await load_view(
        request,
        {"employees": api.list_employees()},
        failure="Failed to load employees",
        initial={"employees": []},
    )
    context = {
        "view": view,
        "employees": view.get("employees", []),
        "form": form,
        "net_salary": net_salary(form["basicSalary"], form["bonuses"], form["deductions"]),
    }
    return render_page(request, "payroll/create.html", context, status_code=status_code)


@router.post("/create", response_class=HTMLResponse)
async def create_payroll(
    request: Request,
    employeeId: str = Form(""),
    period: str = Form(""),
    basicSalary: str = Form(""),
    bonuses: str = Form(""),
    deductions: str = Form(""),
    api: HRApiClient = Depends(get_api_client),
):
    form = {
        "employeeId": employeeId,
        "period": period,
        "basicSalary": basicSalary,
        "bonuses": bonuses,
        "deductions": deductions,
    }
    try:
        payload = PayrollCreate(
            employee_id=employeeId,
            period=period,
            basic_salary=basicSalary.strip() or None,
            bonuses=float(parse_amount(bonuses)),
            deductions=float(parse_amount(deductions)),
        )
    except ValidationError:
        notify(request, "Employee, period and basic salary are required", level="error", title="Validation Error")
        return await _create_form(request, api, form, status_code=400)

    created = await run_mutation(
        request,
        api.create_payroll(payload),
        success="Payroll created successfully",
        failure="Failed to create payroll",
        server_message=True,
    )
    if not created:
        return await _create_form(request, api, form, status_code=400)
    return RedirectResponse(url="/payroll", status_code=303)


@router.get("/bulk-generate", response_class=HTMLResponse)
async def bulk_generate_page(request: Request, api: HRApiClient = Depends(get_api_client)):
    return await _bulk_form(request, api, selected=[], period="")


async def _bulk_form(
    request: Request,
    api: HRApiClient,
    *,
    selected: list[str],
    period: str,
    status_code: int = 200,
):
    view = await load_view(
        request,
        {"employees": api.list_employees("active")},
        failure="Failed to load employees",
        initial={"employees": []},
    )
    context = {
        "view": view,
        "employees": view.get("employees", []),
        "selected": set(selected),
        "period": period,
    }
    return render_page(request, "payroll/bulk_generate.html", context, status_code=status_code)


@router.post("/bulk-generate", response_class=HTMLResponse)
async def bulk_generate(request: Request, api: HRApiClient = Depends(get_api_client)):
    form = await request.form()
    selected = [str(value) for value in form.getlist("employeeIds") if str(value)]
    period = str(form.get("period") or "")
    if not selected:
        notify(request, "Please select at least one employee", level="error", title="Validation Error")
        return await _bulk_form(request, api, selected=selected, period=period, status_code=400)
    try:
        payload = BulkGenerateRequest(employee_ids=selected, period=period)
    except ValidationError:
        notify(request, "Please choose a payroll period", level="error", title="Validation Error")
        return await _bulk_form(request, api, selected=selected, period=period, status_code=400)

    generated = await run_mutation(
        request,
        api.bulk_generate_payroll(payload),
        success=f"Generated payroll for {len(selected)} employees",
        failure="Failed to generate payroll",
        server_message=True,
    )
    if not generated:
        return await _bulk_form(request, api, selected=selected, period=period, status_code=400)
    return RedirectResponse(url="/payroll", status_code=303)


@router.get("/{payroll_id}", response_class=HTMLResponse)
async def payroll_detail_page(request: Request, payroll_id: str, api: HRApiClient = Depends(get_api_client)):
    view = await load_view(
        request,
        {"payroll": api.get_payroll(payroll_id)},
        failure="Failed to load payroll details",
        initial={"payroll": None},
    )
    return render_page(request, "payroll/detail.html", {"view": view, "payroll": view.get("payroll")})


@router.get("/{payroll_id}/slip")
async def download_slip(request: Request, payroll_id: str, api: HRApiClient = Depends(get_api_client)):
    try:
        download = await api.payroll_slip(payroll_id)
    except ApiError:
        notify(request, "Failed to download payslip", level="error")
        return RedirectResponse(url=f"/payroll/{payroll_id}", status_code=303)
    return _attachment(download, f"payslip_{payroll_id}.pdf")


@router.post("/{payroll_id}/pay")
async def mark_as_paid(request: Request, payroll_id: str, api: HRApiClient = Depends(get_api_client)):
    await run_mutation(
        request,
        api.update_payroll_status(payroll_id, "paid"),
        success="Payroll marked as paid",
        failure="Failed to update payroll status",
    )
    return RedirectResponse(url="/payroll", status_code=303)
