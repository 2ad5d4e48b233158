from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from helpdesk.core.errors import ValidationFailed
from helpdesk.deps import get_ticket_repository
from helpdesk.models.ticket import STATUSES
from helpdesk.schemas.ticket import TicketCreate, TicketRead
from helpdesk.services.ticket_repository import TicketRepository

router = APIRouter(prefix="/tickets", tags=["tickets"])


def _serialize(ticket) -> dict:
    return TicketRead.model_validate(ticket).model_dump(mode="json")


@router.get("")
def list_tickets(
    status: Optional[str] = None,
    tickets: TicketRepository = Depends(get_ticket_repository),
):
    if status is not None and status not in STATUSES:
        raise ValidationFailed(["Status is not included in the list"])
    return {"success": True, "data": [_serialize(ticket) for ticket in tickets.list(status=status)]}


@router.get("/active")
def list_active_tickets(tickets: TicketRepository = Depends(get_ticket_repository)):
    return {"success": True, "data": [_serialize(ticket) for ticket in tickets.list_active()]}


@router.get("/{ticket_id}")
def get_ticket(ticket_id: int, tickets: TicketRepository = Depends(get_ticket_repository)):
    return {"success": True, "data": _serialize(tickets.get(ticket_id))}


@router.post("", status_code=201)
def create_ticket(
    payload: TicketCreate,
    tickets: TicketRepository = Depends(get_ticket_repository),
):
    ticket = tickets.create(payload)
    return {"success": True, "data": _serialize(ticket), "message": "Ticket created"}


@router.delete("/{ticket_id}")
def delete_ticket(ticket_id: int, tickets: TicketRepository = Depends(get_ticket_repository)):
    tickets.soft_delete(ticket_id)
    return {"success": True, "message": "Ticket deleted"}
