from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from helpdesk.core.errors import ValidationFailed
from helpdesk.models.user import ROLES, User
from helpdesk.services.passwords import hash_password, password_too_long

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class CredentialStore:
    """Users and their password hashes. Every lookup is keyed by tenant id."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_email(self, tenant_id: int, email: str) -> User | None:
        normalized_email = normalize_email(email)
        if not normalized_email:
            return None
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, User.email == normalized_email)
            .first()
        )

    def get(self, tenant_id: int, user_id: int) -> User | None:
        return (
            self.db.query(User)
            .filter(User.tenant_id == tenant_id, User.id == user_id)
            .first()
        )

    def validate_new_user(
        self,
        tenant_id: int,
        *,
        email: str,
        password: str | None,
        password_confirmation: str | None = None,
        role: str = "user",
    ) -> list[str]:
        errors: list[str] = []
        normalized_email = normalize_email(email)
        if not normalized_email:
            errors.append("Email can't be blank")
        elif self.find_by_email(tenant_id, normalized_email) is not None:
            errors.append("Email has already been taken")

        if not password:
            errors.append("Password can't be blank")
        elif password_too_long(password):
            errors.append("Password is too long (maximum is 72 bytes)")

        if password_confirmation is not None and password_confirmation != password:
            errors.append("Password confirmation doesn't match Password")

        if role not in ROLES:
            errors.append("Role is not included in the list")
        return errors

    def build_user(
        self,
        tenant_id: int,
        *,
        email: str,
        password: str | None,
        password_confirmation: str | None = None,
        role: str = "user",
    ) -> User:
        """Validate and return an unsaved user; the caller decides when to commit."""
        errors = self.validate_new_user(
            tenant_id,
            email=email,
            password=password,
            password_confirmation=password_confirmation,
            role=role,
        )
        if errors:
            raise ValidationFailed(errors)

        return User(
            tenant_id=tenant_id,
            email=normalize_email(email),
            password_hash=hash_password(password),
            role=role,
        )

    def create_user(
        self,
        tenant_id: int,
        *,
        email: str,
        password: str | None,
        password_confirmation: str | None = None,
        role: str = "user",
    ) -> User:
        user = self.build_user(
            tenant_id,
            email=email,
            password=password,
            password_confirmation=password_confirmation,
            role=role,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # concurrent sign-up with the same email in the same tenant
            self.db.rollback()
            raise ValidationFailed(["Email has already been taken"]) from exc
        self.db.refresh(user)
        logger.info("User created tenant_id=%s user_id=%s role=%s", tenant_id, user.id, user.role)
        return user
