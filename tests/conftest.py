import os

os.environ.setdefault("ENV", "test")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("BASE_DOMAIN", "helpdesk.localhost")
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import helpdesk.models  # noqa: F401
from helpdesk.core.database import Base
from helpdesk.core.request_context import RequestContext, ResolvedTenant
from helpdesk.services.credential_store import CredentialStore
from helpdesk.services.tenant_provisioning import create_tenant
from tests.fixtures_data import (
    ACME_ALICE_SECRET,
    ACME_TENANT,
    ALICE,
    BETA_ALICE_SECRET,
    BETA_TENANT,
)


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def tenants(db):
    """Two tenants that each have a user called alice@example.com with the same password."""
    acme = create_tenant(db, **ACME_TENANT)
    beta = create_tenant(db, **BETA_TENANT)
    store = CredentialStore(db)
    acme_alice = store.create_user(acme.id, **ALICE)
    beta_alice = store.create_user(beta.id, **ALICE)
    return {
        "acme": acme,
        "beta": beta,
        "acme_alice": acme_alice,
        "beta_alice": beta_alice,
    }


@pytest.fixture
def split_password_tenants(db):
    """acme and beta each have alice@example.com, with secret1 and secret2 respectively."""
    acme = create_tenant(db, **ACME_TENANT)
    beta = create_tenant(db, **BETA_TENANT)
    store = CredentialStore(db)
    return {
        "acme": acme,
        "beta": beta,
        "acme_alice": store.create_user(acme.id, **ACME_ALICE_SECRET),
        "beta_alice": store.create_user(beta.id, **BETA_ALICE_SECRET),
    }


@pytest.fixture
def make_context():
    def _make(tenant, user_id=None):
        context = RequestContext()
        context.bind_tenant(ResolvedTenant(id=tenant.id, subdomain=tenant.subdomain))
        if user_id is not None:
            context.bind_user(user_id)
        return context

    return _make
