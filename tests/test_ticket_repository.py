import pytest

from helpdesk.core.errors import Forbidden, NotFound, TenantContextRequired, ValidationFailed
from helpdesk.core.request_context import RequestContext
from helpdesk.models.ticket import Ticket
from helpdesk.schemas.ticket import TicketCreate
from helpdesk.services.credential_store import CredentialStore
from helpdesk.services.ticket_repository import TicketRepository
from tests.fixtures_data import (
    ACME_ADMIN,
    HAPPY_PATH_TICKET_PAYLOAD,
    INVALID_PRIORITY_TICKET_PAYLOAD,
    SPOOFED_OWNERSHIP_TICKET_PAYLOAD,
)


def _repository(db, make_context, tenant, user):
    return TicketRepository(db, make_context(tenant, user.id))


def test_repository_requires_a_tenant(db):
    with pytest.raises(TenantContextRequired):
        TicketRepository(db, RequestContext())


def test_create_stamps_tenant_and_user_from_context(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    ticket = repo.create(TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD))

    assert ticket.id is not None
    assert ticket.tenant_id == tenants["acme"].id
    assert ticket.user_id == tenants["acme_alice"].id
    assert ticket.status == "open"
    assert ticket.priority == "high"


def test_create_ignores_ownership_fields_in_payload(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    ticket = repo.create(TicketCreate(**SPOOFED_OWNERSHIP_TICKET_PAYLOAD))

    assert ticket.tenant_id == tenants["acme"].id
    assert ticket.user_id == tenants["acme_alice"].id


def test_create_requires_an_authenticated_user(db, tenants, make_context):
    repo = TicketRepository(db, make_context(tenants["acme"]))

    with pytest.raises(TenantContextRequired):
        repo.create(TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD))


def test_invalid_priority_persists_nothing(db, tenants, make_context, caplog):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    with caplog.at_level("ERROR"), pytest.raises(ValidationFailed) as excinfo:
        repo.create(TicketCreate(**INVALID_PRIORITY_TICKET_PAYLOAD))

    assert excinfo.value.errors == ["Priority is not included in the list"]
    assert db.query(Ticket).count() == 0
    assert any(record.message == "Ticket creation failed" for record in caplog.records)


def test_blank_title_and_bad_status_are_reported_together(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    with pytest.raises(ValidationFailed) as excinfo:
        repo.create(TicketCreate(title="  ", priority="low", status="pending"))

    assert excinfo.value.errors == [
        "Title can't be blank",
        "Status is not included in the list",
    ]


def test_tickets_are_invisible_across_tenants(db, tenants, make_context):
    acme_repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])
    beta_repo = _repository(db, make_context, tenants["beta"], tenants["beta_alice"])
    acme_ticket = acme_repo.create(TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD))
    beta_ticket = beta_repo.create(TicketCreate(title="Beta only", priority="low"))

    assert [ticket.id for ticket in acme_repo.list()] == [acme_ticket.id]
    assert [ticket.id for ticket in beta_repo.list()] == [beta_ticket.id]
    with pytest.raises(NotFound):
        beta_repo.get(acme_ticket.id)


def test_list_filters_by_status_and_active_means_open(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])
    open_ticket = repo.create(TicketCreate(title="Open", priority="low"))
    closed_ticket = repo.create(TicketCreate(title="Closed", priority="low", status="closed"))

    assert [ticket.id for ticket in repo.list(status="closed")] == [closed_ticket.id]
    assert [ticket.id for ticket in repo.list_active()] == [open_ticket.id]
    assert {ticket.id for ticket in repo.list()} == {open_ticket.id, closed_ticket.id}


def test_list_returns_newest_first(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])
    first = repo.create(TicketCreate(title="First", priority="low"))
    second = repo.create(TicketCreate(title="Second", priority="low"))

    assert [ticket.id for ticket in repo.list()] == [second.id, first.id]


def test_get_missing_ticket_raises_not_found(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    with pytest.raises(NotFound):
        repo.get(12345)


def test_owner_soft_deletes_ticket(db, tenants, make_context):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])
    ticket = repo.create(TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD))

    repo.soft_delete(ticket.id)

    assert repo.list() == []
    with pytest.raises(NotFound):
        repo.get(ticket.id)
    assert db.query(Ticket).filter(Ticket.id == ticket.id).one().deleted_at is not None


def test_other_user_cannot_delete_but_admin_can(db, tenants, make_context):
    store = CredentialStore(db)
    bob = store.create_user(tenants["acme"].id, email="bob@example.com", password="bob-password")
    admin = store.create_user(tenants["acme"].id, role="admin", **ACME_ADMIN)
    ticket = _repository(db, make_context, tenants["acme"], tenants["acme_alice"]).create(
        TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD)
    )

    with pytest.raises(Forbidden):
        _repository(db, make_context, tenants["acme"], bob).soft_delete(ticket.id)

    _repository(db, make_context, tenants["acme"], admin).soft_delete(ticket.id)
    assert db.query(Ticket).filter(Ticket.id == ticket.id).one().deleted_at is not None


def test_cannot_delete_another_tenants_ticket(db, tenants, make_context):
    acme_ticket = _repository(db, make_context, tenants["acme"], tenants["acme_alice"]).create(
        TicketCreate(**HAPPY_PATH_TICKET_PAYLOAD)
    )
    beta_repo = _repository(db, make_context, tenants["beta"], tenants["beta_alice"])

    with pytest.raises(NotFound):
        beta_repo.soft_delete(acme_ticket.id)


@pytest.mark.parametrize("ticket_id", [0, -1, 2**63, 10**23])
def test_ids_outside_the_column_range_are_not_found(db, tenants, make_context, ticket_id):
    repo = _repository(db, make_context, tenants["acme"], tenants["acme_alice"])

    with pytest.raises(NotFound):
        repo.get(ticket_id)
    with pytest.raises(NotFound):
        repo.soft_delete(ticket_id)
