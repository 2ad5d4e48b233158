from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response, status

from helpdesk.core.request_context import RequestContext
from helpdesk.deps import get_auth_service, get_request_context
from helpdesk.schemas.auth import SignupPayload, UserRead
from helpdesk.services.auth_service import AuthenticationService
from helpdesk.services.session_cookie import set_session_cookie

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(
    payload: SignupPayload,
    request: Request,
    response: Response,
    context: RequestContext = Depends(get_request_context),
    auth: AuthenticationService = Depends(get_auth_service),
):
    # tenant comes from the subdomain; the new user always joins it as a plain user
    session = auth.register(
        context,
        email=payload.email,
        password=payload.password,
        password_confirmation=payload.password_confirmation,
    )
    set_session_cookie(response, session.token, request)
    return {
        "success": True,
        "data": UserRead.model_validate(session.user).model_dump(),
        "message": "Account created and signed in!",
        "redirect_to": "/tickets",
    }
