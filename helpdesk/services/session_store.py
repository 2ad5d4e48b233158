from __future__ import annotations

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from helpdesk.core.config import SESSION_MAX_AGE_SECONDS
from helpdesk.models.user_session import UserSession

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32
# token_urlsafe(32) yields 43 characters; anything far outside that is malformed
MAX_TOKEN_LENGTH = 128
_TOKEN_ALPHABET = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


def _now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("ascii")).hexdigest()


def _is_well_formed(token: object) -> bool:
    return (
        isinstance(token, str)
        and 0 < len(token) <= MAX_TOKEN_LENGTH
        and all(char in _TOKEN_ALPHABET for char in token)
    )


class SessionStore:
    """Opaque session tokens mapped to user ids.

    Tokens carry no tenant; the caller re-checks the user's tenant on every
    request. Only a SHA-256 digest of each token is stored.
    """

    def __init__(self, db: Session, max_age_seconds: int = SESSION_MAX_AGE_SECONDS) -> None:
        self.db = db
        self.max_age = timedelta(seconds=max_age_seconds)

    def create(self, user_id: int) -> str:
        token = secrets.token_urlsafe(TOKEN_BYTES)
        now = _now()
        self._delete_expired(now)
        self.db.add(
            UserSession(
                token_digest=_digest(token),
                user_id=user_id,
                created_at=now,
                expires_at=now + self.max_age,
            )
        )
        self.db.commit()
        logger.info("Session created user_id=%s", user_id)
        return token

    def resolve(self, token: str | None) -> int | None:
        if not _is_well_formed(token):
            return None
        record = (
            self.db.query(UserSession)
            .filter(
                UserSession.token_digest == _digest(token),
                UserSession.expires_at > _now(),
            )
            .first()
        )
        if record is None:
            return None
        return int(record.user_id)

    def destroy(self, token: str | None) -> None:
        if not _is_well_formed(token):
            return
        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.token_digest == _digest(token))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        if deleted:
            logger.info("Session destroyed")

    def purge_expired(self) -> int:
        deleted = self._delete_expired(_now())
        self.db.commit()
        return deleted

    def _delete_expired(self, now: datetime) -> int:
        # committed together with the caller's own change
        return (
            self.db.query(UserSession)
            .filter(UserSession.expires_at <= now)
            .delete(synchronize_session=False)
        )

    def destroy_all_for_user(self, user_id: int) -> int:
        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted
