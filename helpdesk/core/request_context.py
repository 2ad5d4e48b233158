from __future__ import annotations

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator

from helpdesk.core.errors import ContextAlreadyBound, TenantContextRequired


@dataclass(frozen=True)
class ResolvedTenant:
    """Tenant identity as returned by the tenant directory."""

    id: int
    subdomain: str


class RequestContext:
    """Tenant and user identity for exactly one inbound request.

    The tenant is bound once, right after the subdomain is resolved, and the
    user once, right after authentication. Neither can be overwritten, so a
    handler further down the stack has no way to move the request into another
    tenant.
    """

    __slots__ = ("request_id", "_tenant", "_user_id")

    def __init__(self, request_id: str | None = None) -> None:
        self.request_id = request_id or str(uuid.uuid4())
        self._tenant: ResolvedTenant | None = None
        self._user_id: int | None = None

    def __repr__(self) -> str:
        return (
            f"RequestContext(request_id={self.request_id!r}, "
            f"tenant_id={self.tenant_id!r}, user_id={self._user_id!r})"
        )

    @property
    def tenant_id(self) -> int | None:
        return self._tenant.id if self._tenant is not None else None

    @property
    def tenant_subdomain(self) -> str | None:
        return self._tenant.subdomain if self._tenant is not None else None

    @property
    def user_id(self) -> int | None:
        return self._user_id

    @property
    def is_authenticated(self) -> bool:
        return self._user_id is not None

    def bind_tenant(self, tenant: ResolvedTenant) -> None:
        if not isinstance(tenant, ResolvedTenant):
            raise TypeError("bind_tenant expects a ResolvedTenant from the tenant directory")
        if self._tenant is not None:
            raise ContextAlreadyBound("tenant is already bound for this request")
        self._tenant = tenant

    def bind_user(self, user_id: int) -> None:
        if self._tenant is None:
            raise TenantContextRequired("cannot bind a user before the tenant is resolved")
        if self._user_id is not None:
            raise ContextAlreadyBound("user is already bound for this request")
        self._user_id = int(user_id)

    def require_tenant_id(self) -> int:
        if self._tenant is None:
            raise TenantContextRequired("no tenant resolved for this request")
        return self._tenant.id

    def require_user_id(self) -> int:
        if self._user_id is None:
            raise TenantContextRequired("no authenticated user for this request")
        return self._user_id


# Read by the log formatter only; data access receives the context explicitly.
_CURRENT_CONTEXT: ContextVar[RequestContext | None] = ContextVar("request_context", default=None)


@contextmanager
def activated(context: RequestContext) -> Iterator[RequestContext]:
    token = _CURRENT_CONTEXT.set(context)
    try:
        yield context
    finally:
        _CURRENT_CONTEXT.reset(token)


def get_current_context() -> RequestContext | None:
    return _CURRENT_CONTEXT.get()


def get_request_id() -> str | None:
    context = _CURRENT_CONTEXT.get()
    return context.request_id if context is not None else None


def get_tenant_id() -> int | None:
    context = _CURRENT_CONTEXT.get()
    return context.tenant_id if context is not None else None


def get_user_id() -> int | None:
    context = _CURRENT_CONTEXT.get()
    return context.user_id if context is not None else None
