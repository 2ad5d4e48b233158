from __future__ import annotations

import logging
import time

from fastapi import Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from helpdesk.core.config import TENANT_EXEMPT_PATHS
from helpdesk.core.database import SessionLocal
from helpdesk.core.error_handlers import tenant_not_found_response
from helpdesk.core.errors import TenantNotFound
from helpdesk.core.request_context import RequestContext, ResolvedTenant, activated
from helpdesk.services.tenant_directory import TenantDirectory

logger = logging.getLogger(__name__)

MAX_REQUEST_ID_LENGTH = 128


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Create a fresh RequestContext for every request and bind its tenant.

    Tenant resolution happens here, before routing, so a request for an
    unknown subdomain is rejected before any authentication or data access
    runs. The context is dropped when the request finishes, including when the
    handler raises.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        context = RequestContext(request_id=_incoming_request_id(request))
        request.state.request_context = context

        status_code = 500
        response = None
        with activated(context):
            try:
                if request.url.path not in TENANT_EXEMPT_PATHS:
                    try:
                        tenant = await run_in_threadpool(_resolve_tenant, request)
                    except TenantNotFound:
                        response = tenant_not_found_response(request)
                        status_code = response.status_code
                        return response
                    context.bind_tenant(tenant)

                response = await call_next(request)
                status_code = response.status_code
                return response
            finally:
                duration_ms = round((time.perf_counter() - start) * 1000, 2)
                logger.info(
                    "request completed",
                    extra={
                        "endpoint": request.url.path,
                        "method": request.method,
                        "status_code": status_code,
                        "duration_ms": duration_ms,
                    },
                )
                if response is not None:
                    response.headers["X-Request-ID"] = context.request_id
                request.state.request_context = None


def _incoming_request_id(request: Request) -> str | None:
    request_id = (request.headers.get("X-Request-ID") or "").strip()
    if not request_id or len(request_id) > MAX_REQUEST_ID_LENGTH:
        return None
    return request_id


def _resolve_tenant(request: Request) -> ResolvedTenant:
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or ""
    session_factory = getattr(request.app.state, "session_factory", None) or SessionLocal
    db = session_factory()
    try:
        return TenantDirectory(db).resolve_host(host)
    finally:
        db.close()
