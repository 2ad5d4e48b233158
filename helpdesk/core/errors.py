"""Error taxonomy for the tenancy and authentication core.

Every class here is terminal for the request that raised it. The handlers in
``helpdesk.core.error_handlers`` turn them into responses; nothing retries.
"""
from __future__ import annotations


class HelpdeskError(Exception):
    message = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class TenantNotFound(HelpdeskError):
    message = "Invalid tenant"


class InvalidCredentials(HelpdeskError):
    # Unknown email and wrong password share this message.
    message = "Invalid email or password"


class SessionInvalid(HelpdeskError):
    message = "Please log in"


class NotFound(HelpdeskError):
    message = "Not found"


class Forbidden(HelpdeskError):
    message = "Not allowed"


class ValidationFailed(HelpdeskError):
    message = "Validation failed"

    def __init__(self, errors: list[str]) -> None:
        super().__init__(", ".join(errors) or self.message)
        self.errors = list(errors)


class TenantContextRequired(RuntimeError):
    """Raised when tenant-scoped data access is attempted without a resolved tenant."""


class ContextAlreadyBound(RuntimeError):
    """Raised when a request context field that is set-once is set again."""
