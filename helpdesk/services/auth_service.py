from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from helpdesk.core.errors import InvalidCredentials, SessionInvalid
from helpdesk.core.request_context import RequestContext
from helpdesk.models.user import User
from helpdesk.services.credential_store import CredentialStore, normalize_email
from helpdesk.services.passwords import burn_verification, verify_password
from helpdesk.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedSession:
    user: User
    token: str


class AuthenticationService:
    """Login, session checks, logout and sign-up, always within the context's tenant.

    The tenant is never taken from the caller: it comes from the request
    context, which the middleware bound from the subdomain before this service
    runs.
    """

    def __init__(
        self,
        db: Session,
        credentials: CredentialStore | None = None,
        sessions: SessionStore | None = None,
    ) -> None:
        self.db = db
        self.credentials = credentials or CredentialStore(db)
        self.sessions = sessions or SessionStore(db)

    def login(self, context: RequestContext, email: str, password: str) -> AuthenticatedSession:
        tenant_id = context.require_tenant_id()
        user = self.credentials.find_by_email(tenant_id, email)

        if user is None:
            burn_verification(password or "")
            logger.info("Login rejected tenant_id=%s", tenant_id)
            raise InvalidCredentials()

        if not verify_password(password or "", user.password_hash):
            logger.info("Login rejected tenant_id=%s", tenant_id)
            raise InvalidCredentials()

        token = self.sessions.create(user.id)
        context.bind_user(user.id)
        logger.info("Login succeeded tenant_id=%s user_id=%s", tenant_id, user.id)
        return AuthenticatedSession(user=user, token=token)

    def authenticate(self, context: RequestContext, token: str | None) -> User:
        tenant_id = context.require_tenant_id()
        user_id = self.sessions.resolve(token)
        if user_id is None:
            raise SessionInvalid()

        # A session minted under another tenant's subdomain does not match here.
        user = self.credentials.get(tenant_id, user_id)
        if user is None:
            logger.warning("Session rejected for tenant mismatch tenant_id=%s user_id=%s", tenant_id, user_id)
            raise SessionInvalid()

        context.bind_user(user.id)
        return user

    def logout(self, token: str | None) -> None:
        self.sessions.destroy(token)

    def register(
        self,
        context: RequestContext,
        *,
        email: str,
        password: str | None,
        password_confirmation: str | None = None,
    ) -> AuthenticatedSession:
        tenant_id = context.require_tenant_id()
        user = self.credentials.create_user(
            tenant_id,
            email=normalize_email(email),
            password=password,
            password_confirmation=password_confirmation,
            role="user",
        )
        token = self.sessions.create(user.id)
        context.bind_user(user.id)
        return AuthenticatedSession(user=user, token=token)
