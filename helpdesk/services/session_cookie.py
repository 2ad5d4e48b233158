from __future__ import annotations

from typing import Any, Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from helpdesk.core.config import (
    SESSION_COOKIE_NAME,
    SESSION_COOKIE_SAMESITE,
    SESSION_COOKIE_SECURE,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SECRET,
)

SESSION_COOKIE_SALT = "helpdesk-session"


def _serializer() -> URLSafeTimedSerializer:
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET is not configured.")
    return URLSafeTimedSerializer(SESSION_SECRET, salt=SESSION_COOKIE_SALT)


def sign_session_token(token: str) -> str:
    return _serializer().dumps(token)


def unsign_session_token(value: str | None) -> Optional[str]:
    """Return the session token carried by a cookie value, or None if tampered or stale."""
    if not value:
        return None
    try:
        token = _serializer().loads(value, max_age=SESSION_MAX_AGE_SECONDS)
    except (BadSignature, SignatureExpired, ValueError):
        return None
    return token if isinstance(token, str) else None


def read_session_token(request: Request) -> Optional[str]:
    return unsign_session_token(request.cookies.get(SESSION_COOKIE_NAME))


def build_session_cookie_options(request: Request | None = None) -> dict[str, Any]:
    secure = SESSION_COOKIE_SECURE
    samesite = SESSION_COOKIE_SAMESITE

    if request is not None:
        host = (request.headers.get("x-forwarded-host") or request.headers.get("host") or "").lower()
        host = host.split(",")[0].strip().split(":")[0]
        # public hosts never get an insecure cookie
        if host not in {"", "localhost", "127.0.0.1", "testserver"} and not host.endswith(".localhost"):
            secure = True

    # Browsers reject SameSite=None without Secure.
    if samesite == "none" and not secure:
        samesite = "lax"

    # Host-only cookie: a session issued on one tenant subdomain is never sent to another.
    return {
        "httponly": True,
        "samesite": samesite,
        "path": "/",
        "secure": secure,
    }


def set_session_cookie(response: Response, token: str, request: Request | None = None) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=sign_session_token(token),
        max_age=SESSION_MAX_AGE_SECONDS,
        **build_session_cookie_options(request),
    )


def clear_session_cookie(response: Response, request: Request | None = None) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        **build_session_cookie_options(request),
    )
