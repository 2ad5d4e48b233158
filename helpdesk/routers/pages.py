from typing import Optional

from fastapi import APIRouter, Depends

from helpdesk.core.config import APP_NAME
from helpdesk.core.request_context import RequestContext
from helpdesk.deps import get_request_context

router = APIRouter(tags=["pages"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/")
def root(alert: Optional[str] = None, notice: Optional[str] = None):
    return {"app": APP_NAME, "alert": alert, "notice": notice}


@router.get("/login")
def login_page(
    alert: Optional[str] = None,
    notice: Optional[str] = None,
    context: RequestContext = Depends(get_request_context),
):
    return {"tenant": context.tenant_subdomain, "alert": alert, "notice": notice}
