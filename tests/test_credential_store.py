import pytest

from helpdesk.core.errors import ValidationFailed
from helpdesk.services.credential_store import CredentialStore
from helpdesk.services.passwords import verify_password
from tests.fixtures_data import ALICE_PASSWORD


def test_find_by_email_is_keyed_by_tenant(db, tenants):
    store = CredentialStore(db)

    acme_user = store.find_by_email(tenants["acme"].id, "alice@example.com")
    beta_user = store.find_by_email(tenants["beta"].id, "alice@example.com")

    assert acme_user.id == tenants["acme_alice"].id
    assert beta_user.id == tenants["beta_alice"].id
    assert acme_user.id != beta_user.id


def test_find_by_email_normalizes_case_and_whitespace(db, tenants):
    store = CredentialStore(db)

    user = store.find_by_email(tenants["acme"].id, "  Alice@Example.COM ")

    assert user is not None
    assert user.tenant_id == tenants["acme"].id


def test_find_by_email_misses_return_none(db, tenants):
    store = CredentialStore(db)

    assert store.find_by_email(tenants["acme"].id, "bob@example.com") is None
    assert store.find_by_email(tenants["acme"].id, "") is None


def test_get_does_not_cross_tenants(db, tenants):
    store = CredentialStore(db)

    assert store.get(tenants["beta"].id, tenants["acme_alice"].id) is None
    assert store.get(tenants["acme"].id, tenants["acme_alice"].id).email == "alice@example.com"


def test_password_is_stored_as_bcrypt_hash(db, tenants):
    user = tenants["acme_alice"]

    assert user.password_hash != ALICE_PASSWORD
    assert verify_password(ALICE_PASSWORD, user.password_hash)


def test_same_email_allowed_in_another_tenant_but_not_twice_in_one(db, tenants):
    store = CredentialStore(db)

    with pytest.raises(ValidationFailed) as excinfo:
        store.create_user(tenants["acme"].id, email="ALICE@example.com", password="another-pass")

    assert excinfo.value.errors == ["Email has already been taken"]


def test_create_user_collects_every_error(db, tenants):
    store = CredentialStore(db)

    with pytest.raises(ValidationFailed) as excinfo:
        store.create_user(
            tenants["acme"].id,
            email="",
            password="",
            password_confirmation="x",
            role="superuser",
        )

    assert excinfo.value.errors == [
        "Email can't be blank",
        "Password can't be blank",
        "Password confirmation doesn't match Password",
        "Role is not included in the list",
    ]


def test_create_user_rejects_passwords_over_72_bytes(db, tenants):
    store = CredentialStore(db)

    with pytest.raises(ValidationFailed) as excinfo:
        store.create_user(tenants["acme"].id, email="long@example.com", password="p" * 73)

    assert excinfo.value.errors == ["Password is too long (maximum is 72 bytes)"]


def test_new_users_default_to_user_role(db, tenants):
    store = CredentialStore(db)

    user = store.create_user(tenants["beta"].id, email="carol@example.com", password="carol-pass")

    assert user.role == "user"
    assert user.is_admin is False
