from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpdesk.core.errors import ValidationFailed
from helpdesk.models.tenant import Tenant
from helpdesk.models.user import User
from helpdesk.services.credential_store import CredentialStore
from helpdesk.services.tenant_directory import is_valid_subdomain, normalize_subdomain

logger = logging.getLogger(__name__)


def validate_tenant(db: Session, *, name: str, subdomain: str) -> list[str]:
    errors: list[str] = []
    clean_name = (name or "").strip()
    if not clean_name:
        errors.append("Name can't be blank")
    elif db.query(Tenant.id).filter(Tenant.name == clean_name).first() is not None:
        errors.append("Name has already been taken")

    normalized = normalize_subdomain(subdomain)
    if not normalized:
        errors.append("Subdomain can't be blank")
    elif not is_valid_subdomain(normalized):
        errors.append("Subdomain is invalid")
    elif db.query(Tenant.id).filter(Tenant.subdomain == normalized).first() is not None:
        errors.append("Subdomain has already been taken")
    return errors


def create_tenant(db: Session, *, name: str, subdomain: str) -> Tenant:
    errors = validate_tenant(db, name=name, subdomain=subdomain)
    if errors:
        raise ValidationFailed(errors)

    tenant = Tenant(name=name.strip(), subdomain=normalize_subdomain(subdomain))
    db.add(tenant)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailed(["Subdomain has already been taken"]) from exc
    db.refresh(tenant)
    logger.info("Tenant created tenant_id=%s subdomain=%s", tenant.id, tenant.subdomain)
    return tenant


def provision_tenant(
    db: Session,
    *,
    name: str,
    subdomain: str,
    admin_email: str,
    admin_password: str,
) -> tuple[Tenant, User]:
    """Create a tenant together with its first admin, or neither."""
    errors = validate_tenant(db, name=name, subdomain=subdomain)
    if errors:
        raise ValidationFailed(errors)

    tenant = Tenant(name=name.strip(), subdomain=normalize_subdomain(subdomain))
    db.add(tenant)
    try:
        db.flush()
        admin = CredentialStore(db).build_user(
            tenant.id,
            email=admin_email,
            password=admin_password,
            role="admin",
        )
        db.add(admin)
        db.commit()
    except ValidationFailed:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        raise ValidationFailed(["Subdomain has already been taken"]) from exc

    db.refresh(tenant)
    db.refresh(admin)
    logger.info(
        "Tenant provisioned tenant_id=%s subdomain=%s admin_id=%s",
        tenant.id,
        tenant.subdomain,
        admin.id,
    )
    return tenant, admin
