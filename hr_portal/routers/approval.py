from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from ..core.jinja import render_page
from ..deps.api import get_api_client
from ..deps.ui_auth import require_ui_session
from ..schemas.hr import APPROVAL_TABS, ApprovalDecision
from ..services.api_client import HRApiClient
from ..services.approvals import ACTION_STATUS, count_by_status, filter_by_tab, normalize_tab
from ..services.resources import load_view, run_mutation

router = APIRouter(prefix="/approval", dependencies=[Depends(require_ui_session)])


@router.get("", response_class=HTMLResponse)
async def approval_page(
    request: Request,
    tab: str = "pending",
    review: str = "",
    action: str = "",
    api: HRApiClient = Depends(get_api_client),
):
    tab = normalize_tab(tab)
    view = await load_view(
        request,
        {"approvals": api.list_approvals()},
        failure="Failed to load approval requests",
        initial={"approvals": []},
    )
    approvals = view.get("approvals", [])
    reviewing = None
    if action in ACTION_STATUS:
        reviewing = next((item for item in approvals if str(item.get("id")) == review), None)
    context = {
        "view": view,
        "tab": tab,
        "tabs": APPROVAL_TABS,
        "counts": count_by_status(approvals),
        "approvals": filter_by_tab(approvals, tab),
        "reviewing": reviewing,
        "action": action if reviewing else "",
    }
    return render_page(request, "approval.html", context)


@router.post("/{approval_id}/{action}")
async def decide_approval(
    request: Request,
    approval_id: str,
    action: str,
    reviewerNotes: str = Form(""),
    tab: str = Form("pending"),
    api: HRApiClient = Depends(get_api_client),
):
    if action not in ACTION_STATUS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown approval action")
    decision = ApprovalDecision(status=ACTION_STATUS[action], reviewer_notes=reviewerNotes)
    await run_mutation(
        request,
        api.review_approval(approval_id, decision),
        success=f"Request {ACTION_STATUS[action]} successfully",
        failure="Failed to process approval request",
    )
    return RedirectResponse(url=f"/approval?tab={normalize_tab(tab)}", status_code=303)
