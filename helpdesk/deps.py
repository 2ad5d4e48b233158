# helpdesk/deps.py
from __future__ import annotations

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from helpdesk.core.database import get_db
from helpdesk.core.errors import TenantNotFound
from helpdesk.core.request_context import RequestContext
from helpdesk.models.user import User
from helpdesk.services.auth_service import AuthenticationService
from helpdesk.services.session_cookie import read_session_token
from helpdesk.services.ticket_repository import TicketRepository


def get_request_context(request: Request) -> RequestContext:
    """The context built by RequestContextMiddleware; routes never receive a tenant id any other way."""
    context = getattr(request.state, "request_context", None)
    if context is None or context.tenant_id is None:
        raise TenantNotFound()
    return context


def get_auth_service(db: Session = Depends(get_db)) -> AuthenticationService:
    return AuthenticationService(db)


def require_authenticated_user(
    request: Request,
    context: RequestContext = Depends(get_request_context),
    auth: AuthenticationService = Depends(get_auth_service),
) -> User:
    user = auth.authenticate(context, read_session_token(request))
    request.state.user = user
    return user


def get_ticket_repository(
    user: User = Depends(require_authenticated_user),
    context: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
) -> TicketRepository:
    return TicketRepository(db, context)
