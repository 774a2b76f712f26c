from __future__ import annotations

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from ..core.jinja import render_page
from ..deps.api import get_api_client, get_store
from ..deps.ui_auth import require_ui_session
from ..services.api_client import HRApiClient
from ..services.attendance import next_attendance_status, resolve_day
from ..services.resources import load_view, run_mutation
from ..session.store import SessionStore

router = APIRouter(prefix="/attendance", dependencies=[Depends(require_ui_session)])


async def _load_attendance(request: Request, api: HRApiClient, day: str, *, key: str | None = None):
    return await load_view(
        request,
        {
            "attendances": api.list_attendance(day),
            "summary": api.attendance_summary(day),
        },
        failure="Failed to load attendance data",
        initial={"attendances": [], "summary": None},
        sequencer=request.app.state.fetch_sequencer if key else None,
        key=key,
    )


@router.get("", response_class=HTMLResponse)
async def attendance_page(request: Request, date: str = "", api: HRApiClient = Depends(get_api_client)):
    day = resolve_day(date, request.app.state.settings.TZ)
    view = await _load_attendance(request, api, day)
    return render_page(request, "attendance.html", {"view": view, "day": day, **view.data})


@router.get("/table", response_class=HTMLResponse)
async def attendance_table(
    request: Request,
    date: str = "",
    api: HRApiClient = Depends(get_api_client),
    store: SessionStore = Depends(get_store),
):
    """Table fragment refreshed as the date picker changes; older answers are dropped."""

    day = resolve_day(date, request.app.state.settings.TZ)
    profile = store.get_profile()
    key = f"attendance:{profile.id if profile else 'anonymous'}"
    view = await _load_attendance(request, api, day, key=key)
    if view.stale:
        return Response(status_code=204)
    context = {"view": view, "day": day, "fragment": True, **view.data}
    return render_page(request, "_attendance_table.html", context)


@router.post("/{attendance_id}/toggle")
async def toggle_attendance(
    request: Request,
    attendance_id: str,
    current_status: str = Form(""),
    date: str = Form(""),
    api: HRApiClient = Depends(get_api_client),
):
    day = resolve_day(date, request.app.state.settings.TZ)
    await run_mutation(
        request,
        api.update_attendance(attendance_id, next_attendance_status(current_status)),
        success="Attendance updated successfully",
        failure="Failed to update attendance",
    )
    return RedirectResponse(url=f"/attendance?date={day}", status_code=303)
