from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from ..core.errors import ApiError
from ..core.jinja import render_page
from ..deps.api import build_api_client, get_store
from ..schemas.auth import LoginResponse
from ..session.store import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _safe_next(target: str | None, default: str) -> str:
    # Only same-site paths; anything else could bounce the user off-site.
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return default


@router.get("/", include_in_schema=False)
def root(request: Request, store: SessionStore = Depends(get_store)):
    settings = request.app.state.settings
    target = settings.DASHBOARD_PATH if store.is_authenticated() else settings.LOGIN_PATH
    return RedirectResponse(url=target, status_code=302)


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, next: str = ""):
    return render_page(request, "login.html", {"next": next, "error": "", "email": ""})


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next: str = Form(""),
    store: SessionStore = Depends(get_store),
):
    settings = request.app.state.settings
    context = {"next": next, "email": email, "error": ""}
    if not email or not password:
        context["error"] = "Email and password are required"
        return render_page(request, "login.html", context, status_code=400)

    async with build_api_client(request, None) as client:
        try:
            payload = await client.login(email, password)
            session = LoginResponse.model_validate(payload)
        except ApiError as exc:
            context["error"] = exc.user_message("Invalid email or password")
            return render_page(request, "login.html", context, status_code=401)
        except ValidationError:
            logger.error("Login response from HR backend was not understood")
            context["error"] = "Login failed, please try again"
            return render_page(request, "login.html", context, status_code=502)

    store.set_token(session.token)
    store.set_profile(session.user)
    request.state.principal = session.user.email
    logger.info("auth.login", extra={"extra_data": {"user_id": session.user.id}})
    return RedirectResponse(url=_safe_next(next, settings.DASHBOARD_PATH), status_code=303)


@router.api_route("/logout", methods=["GET", "POST"])
def logout(store: SessionStore = Depends(get_store)):
    return store.logout()
