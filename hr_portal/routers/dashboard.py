from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ..core.jinja import render_page
from ..deps.api import get_api_client
from ..deps.ui_auth import require_ui_session
from ..services.api_client import HRApiClient
from ..services.resources import load_view

router = APIRouter(prefix="/dashboard", dependencies=[Depends(require_ui_session)])


@router.get("", response_class=HTMLResponse)
async def dashboard_page(request: Request, api: HRApiClient = Depends(get_api_client)):
    view = await load_view(
        request,
        {
            "summary": api.dashboard_summary(),
            "payroll_trend": api.payroll_trend(),
            "attendance_today": api.attendance_today(),
        },
        failure="Failed to load dashboard data",
        initial={"summary": None, "payroll_trend": [], "attendance_today": None},
    )
    return render_page(request, "dashboard.html", {"view": view, **view.data})
