from __future__ import annotations

import bcrypt

from helpdesk.core.config import BCRYPT_ROUNDS

BCRYPT_MAX_BYTES = 72


# =========================
# PASSWORD (bcrypt directly, no passlib)
# - passlib breaks on bcrypt 5.x
# - bcrypt 5.x raises on secrets longer than 72 bytes
# =========================
def _normalize_password_for_bcrypt(password: str) -> bytes:
    """bcrypt only reads the first 72 bytes; longer input is truncated, not rejected."""
    return (password or "").encode("utf-8")[:BCRYPT_MAX_BYTES]


def password_too_long(password: str) -> bool:
    return len((password or "").encode("utf-8")) > BCRYPT_MAX_BYTES


def hash_password(password: str, rounds: int | None = None) -> str:
    salt = bcrypt.gensalt(rounds=rounds or BCRYPT_ROUNDS)
    return bcrypt.hashpw(_normalize_password_for_bcrypt(password), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Constant-time check of ``password`` against a bcrypt hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            _normalize_password_for_bcrypt(password),
            password_hash.encode("utf-8"),
        )
    except ValueError:
        # malformed hash in storage
        return False


# Hashed once at import; burn_verification only ever verifies.
_DUMMY_HASH = hash_password("dummy-password-for-timing")


def burn_verification(password: str) -> None:
    """Run a full bcrypt verification whose result is discarded.

    Used when no user matched, so that an unknown email costs the same as a
    wrong password.
    """
    verify_password(password, _DUMMY_HASH)
