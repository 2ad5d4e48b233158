from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from helpdesk.core.request_context import RequestContext
from helpdesk.deps import get_auth_service, get_request_context, require_authenticated_user
from helpdesk.models.user import User
from helpdesk.schemas.auth import LoginPayload, UserRead
from helpdesk.services.auth_service import AuthenticationService
from helpdesk.services.session_cookie import (
    clear_session_cookie,
    read_session_token,
    set_session_cookie,
)

router = APIRouter(tags=["sessions"])


@router.post("/login")
def login(
    payload: LoginPayload,
    request: Request,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    auth: AuthenticationService = Depends(get_auth_service),
):
    session = auth.login(context, payload.email, payload.password)
    set_session_cookie(response, session.token, request)
    return {
        "success": True,
        "data": UserRead.model_validate(session.user).model_dump(),
        "message": "Logged in successfully",
        "redirect_to": "/tickets",
    }


@router.post("/logout", dependencies=[Depends(get_request_context)])
def logout(
    request: Request,
    response: Response,
    auth: AuthenticationService = Depends(get_auth_service),
):
    auth.logout(read_session_token(request))
    clear_session_cookie(response, request)
    return {"success": True, "message": "Logged out", "redirect_to": "/login"}


@router.get("/me")
def me(user: User = Depends(require_authenticated_user)):
    return {"success": True, "data": UserRead.model_validate(user).model_dump()}
