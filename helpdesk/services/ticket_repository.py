from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from helpdesk.core.errors import Forbidden, NotFound, TenantContextRequired, ValidationFailed
from helpdesk.core.request_context import RequestContext
from helpdesk.models.ticket import PRIORITIES, STATUSES, Ticket
from helpdesk.models.user import User
from helpdesk.schemas.ticket import TicketCreate

logger = logging.getLogger(__name__)

# Largest primary key a BIGINT column can hold
MAX_TICKET_ID = 2**63 - 1


def validate_ticket(payload: TicketCreate) -> list[str]:
    errors: list[str] = []
    if not (payload.title or "").strip():
        errors.append("Title can't be blank")
    if payload.priority not in PRIORITIES:
        errors.append("Priority is not included in the list")
    if (payload.status or "open") not in STATUSES:
        errors.append("Status is not included in the list")
    return errors


class TicketRepository:
    """Ticket data access bound to one request's tenant.

    The tenant id is read from the request context at construction and every
    query goes through ``_scoped``. There is no method that accepts a tenant id
    from the caller.
    """

    def __init__(self, db: Session, context: RequestContext) -> None:
        if context is None or context.tenant_id is None:
            raise TenantContextRequired("ticket access requires a resolved tenant")
        self.db = db
        self.context = context
        self._tenant_id = context.tenant_id

    def _scoped(self) -> Query:
        return self.db.query(Ticket).filter(
            Ticket.tenant_id == self._tenant_id,
            Ticket.deleted_at.is_(None),
        )

    def list(self, status: str | None = None) -> list[Ticket]:
        query = self._scoped()
        if status is not None:
            query = query.filter(Ticket.status == status)
        return query.order_by(Ticket.created_at.desc(), Ticket.id.desc()).all()

    def list_active(self) -> list[Ticket]:
        return self.list(status="open")

    def get(self, ticket_id: int) -> Ticket:
        # Another tenant's ticket and a missing ticket look the same from here.
        if not 0 < ticket_id <= MAX_TICKET_ID:
            raise NotFound("Ticket not found")
        ticket = self._scoped().filter(Ticket.id == ticket_id).first()
        if ticket is None:
            raise NotFound("Ticket not found")
        return ticket

    def create(self, payload: TicketCreate) -> Ticket:
        user_id = self.context.require_user_id()
        errors = validate_ticket(payload)
        if errors:
            logger.error("Ticket creation failed", extra={"errors": errors})
            raise ValidationFailed(errors)

        ticket = Ticket(
            title=payload.title.strip(),
            description=payload.description,
            priority=payload.priority,
            status=payload.status or "open",
            user_id=user_id,
            tenant_id=self._tenant_id,
        )
        self.db.add(ticket)
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Ticket creation failed")
            raise
        self.db.refresh(ticket)
        logger.info(
            "Ticket created for tenant %s, user %s",
            self._tenant_id,
            user_id,
            extra={"tenant_id": self._tenant_id, "user_id": user_id},
        )
        return ticket

    def soft_delete(self, ticket_id: int) -> Ticket:
        ticket = self.get(ticket_id)
        user_id = self.context.require_user_id()
        if ticket.user_id != user_id and not self._acting_user_is_admin(user_id):
            raise Forbidden("Not allowed to delete this ticket")

        ticket.deleted_at = datetime.now(timezone.utc).replace(tzinfo=None)
        self.db.commit()
        logger.info("Ticket deleted ticket_id=%s", ticket.id)
        return ticket

    def _acting_user_is_admin(self, user_id: int) -> bool:
        role = (
            self.db.query(User.role)
            .filter(User.id == user_id, User.tenant_id == self._tenant_id)
            .scalar()
        )
        return role == "admin"
