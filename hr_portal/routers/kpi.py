from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.jinja import render_page
from ..deps.api import get_api_client
from ..deps.ui_auth import require_ui_session
from ..services.api_client import HRApiClient
from ..services.kpi import parse_score, performance_indicator, progress_percent
from ..services.notifications import notify
from ..services.resources import load_view, run_mutation

router = APIRouter(prefix="/kpi", dependencies=[Depends(require_ui_session)])


@router.get("", response_class=HTMLResponse)
async def kpi_page(request: Request, edit: str = "", api: HRApiClient = Depends(get_api_client)):
    view = await load_view(
        request,
        {"kpis": api.list_kpis()},
        failure="Failed to load KPI data",
        initial={"kpis": []},
    )
    rows = [
        {
            "kpi": kpi,
            "indicator": performance_indicator(kpi.get("score"), kpi.get("target")),
            "progress": progress_percent(kpi.get("score"), kpi.get("target")),
        }
        for kpi in view.get("kpis", [])
    ]
    # ``edit`` opens the score dialog for one row.
    editing = next((row["kpi"] for row in rows if str(row["kpi"].get("id")) == edit), None)
    return render_page(request, "kpi.html", {"view": view, "rows": rows, "editing": editing})


@router.post("/{kpi_id}")
async def update_kpi(
    request: Request,
    kpi_id: str,
    score: str = Form(""),
    api: HRApiClient = Depends(get_api_client),
):
    if not score.strip():
        notify(request, "Please enter a score", level="error", title="Validation Error")
        return RedirectResponse(url=f"/kpi?edit={kpi_id}", status_code=303)
    value = parse_score(score)
    if value is None:
        notify(request, "Please enter a valid score", level="error", title="Validation Error")
        return RedirectResponse(url=f"/kpi?edit={kpi_id}", status_code=303)
    updated = await run_mutation(
        request,
        api.update_kpi(kpi_id, value),
        success="KPI score updated successfully",
        failure="Failed to update KPI score",
    )
    target = "/kpi" if updated else f"/kpi?edit={kpi_id}"
    return RedirectResponse(url=target, status_code=303)
