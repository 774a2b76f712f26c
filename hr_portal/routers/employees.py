from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from ..core.jinja import render_page
from ..deps.api import get_api_client
from ..deps.ui_auth import require_ui_session
from ..schemas.hr import EMPLOYEE_STATUSES, EmployeeForm
from ..services.api_client import HRApiClient
from ..services.employees import employee_form_values, search_employees
from ..services.notifications import notify
from ..services.resources import load_view, run_mutation

router = APIRouter(prefix="/employees", dependencies=[Depends(require_ui_session)])

EMPTY_FORM = {
    "name": "",
    "email": "",
    "position": "",
    "department": "",
    "salary": "",
    "joinDate": "",
    "status": "active",
}


def _validation_message(exc: ValidationError) -> str:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first.get("loc", ()))
    return f"{field}: {first.get('msg', 'invalid value')}" if field else "Please check the form"


def _parse_form(values: dict[str, str]) -> EmployeeForm:
    return EmployeeForm.model_validate(
        {
            "name": values["name"].strip(),
            "email": values["email"].strip(),
            "position": values["position"].strip(),
            "department": values["department"].strip(),
            "salary": values["salary"] or None,
            "joinDate": values["joinDate"] or None,
            "status": values["status"] or "active",
        }
    )


def _form_page(request: Request, *, values: dict[str, str], employee_id: str | None, status_code: int = 200):
    context = {
        "form": values,
        "employee_id": employee_id,
        "statuses": EMPLOYEE_STATUSES,
    }
    return render_page(request, "employees/form.html", context, status_code=status_code)


@router.get("", response_class=HTMLResponse)
async def employees_page(
    request: Request,
    q: str = "",
    status: str = "",
    api: HRApiClient = Depends(get_api_client),
):
    view = await load_view(
        request,
        {"employees": api.list_employees(status or None)},
        failure="Failed to load employees",
        initial={"employees": []},
    )
    context = {
        "view": view,
        "employees": search_employees(view.get("employees", []), q),
        "q": q,
        "status": status,
        "statuses": EMPLOYEE_STATUSES,
    }
    return render_page(request, "employees/list.html", context)


@router.get("/create", response_class=HTMLResponse)
def create_employee_page(request: Request):
    return _form_page(request, values=dict(EMPTY_FORM), employee_id=None)


@router.post("/create", response_class=HTMLResponse)
async def create_employee(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    position: str = Form(""),
    department: str = Form(""),
    salary: str = Form(""),
    joinDate: str = Form(""),
    status: str = Form("active"),
    api: HRApiClient = Depends(get_api_client),
):
    values = {
        "name": name,
        "email": email,
        "position": position,
        "department": department,
        "salary": salary,
        "joinDate": joinDate,
        "status": status,
    }
    try:
        form = _parse_form(values)
    except ValidationError as exc:
        notify(request, _validation_message(exc), level="error", title="Validation Error")
        return _form_page(request, values=values, employee_id=None, status_code=400)

    created = await run_mutation(
        request,
        api.create_employee(form),
        success="Employee created successfully",
        failure="Failed to create employee",
        server_message=True,
    )
    if not created:
        return _form_page(request, values=values, employee_id=None, status_code=400)
    return RedirectResponse(url="/employees", status_code=303)


@router.get("/{employee_id}", response_class=HTMLResponse)
async def employee_detail_page(request: Request, employee_id: str, api: HRApiClient = Depends(get_api_client)):
    view = await load_view(
        request,
        {"employee": api.get_employee(employee_id)},
        failure="Failed to load employee details",
        initial={"employee": None},
    )
    return render_page(request, "employees/detail.html", {"view": view, "employee": view.get("employee")})


@router.get("/{employee_id}/edit", response_class=HTMLResponse)
async def edit_employee_page(request: Request, employee_id: str, api: HRApiClient = Depends(get_api_client)):
    view = await load_view(
        request,
        {"employee": api.get_employee(employee_id)},
        failure="Failed to load employee details",
        initial={"employee": None},
    )
    employee = view.get("employee")
    values = employee_form_values(employee, request.app.state.settings.TZ) if employee else dict(EMPTY_FORM)
    return _form_page(request, values=values, employee_id=employee_id)


@router.post("/{employee_id}/edit", response_class=HTMLResponse)
async def update_employee(
    request: Request,
    employee_id: str,
    name: str = Form(""),
    email: str = Form(""),
    position: str = Form(""),
    department: str = Form(""),
    salary: str = Form(""),
    joinDate: str = Form(""),
    status: str = Form("active"),
    api: HRApiClient = Depends(get_api_client),
):
    values = {
        "name": name,
        "email": email,
        "position": position,
        "department": department,
        "salary": salary,
        "joinDate": joinDate,
        "status": status,
    }
    try:
        form = _parse_form(values)
    except ValidationError as exc:
        notify(request, _validation_message(exc), level="error", title="Validation Error")
        return _form_page(request, values=values, employee_id=employee_id, status_code=400)

    updated = await run_mutation(
        request,
        api.update_employee(employee_id, form),
        success="Employee updated successfully",
        failure="Failed to update employee",
        server_message=True,
    )
    if not updated:
        return _form_page(request, values=values, employee_id=employee_id, status_code=400)
    return RedirectResponse(url=f"/employees/{employee_id}", status_code=303)


@router.post("/{employee_id}/delete")
async def delete_employee(request: Request, employee_id: str, api: HRApiClient = Depends(get_api_client)):
    await run_mutation(
        request,
        api.delete_employee(employee_id),
        success="Employee deleted successfully",
        failure="Failed to delete employee",
    )
    return RedirectResponse(url="/employees", status_code=303)
