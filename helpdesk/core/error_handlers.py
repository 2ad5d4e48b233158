from __future__ import annotations

from urllib.parse import urlencode

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse, Response

from helpdesk.core.config import LOGIN_PATH, ROOT_PATH
from helpdesk.core.errors import (
    Forbidden,
    InvalidCredentials,
    NotFound,
    SessionInvalid,
    TenantNotFound,
    ValidationFailed,
)


def wants_json(request: Request) -> bool:
    accept = (request.headers.get("accept") or "").lower()
    content_type = (request.headers.get("content-type") or "").lower()
    return "application/json" in accept or "application/json" in content_type


def rejection_response(request: Request, *, status_code: int, alert: str, redirect_to: str) -> Response:
    """JSON clients get an error body; browsers are sent to ``redirect_to`` with an alert."""
    if wants_json(request):
        return JSONResponse(
            status_code=status_code,
            content={"success": False, "error": alert, "redirect_to": redirect_to},
        )
    return RedirectResponse(
        url=f"{redirect_to}?{urlencode({'alert': alert})}",
        status_code=status.HTTP_303_SEE_OTHER,
    )


def tenant_not_found_response(request: Request, exc: TenantNotFound | None = None) -> Response:
    return rejection_response(
        request,
        status_code=status.HTTP_404_NOT_FOUND,
        alert=TenantNotFound.message,
        redirect_to=ROOT_PATH,
    )


def _session_invalid(request: Request, exc: SessionInvalid) -> Response:
    return rejection_response(
        request,
        status_code=status.HTTP_401_UNAUTHORIZED,
        alert=SessionInvalid.message,
        redirect_to=LOGIN_PATH,
    )


def _invalid_credentials(request: Request, exc: InvalidCredentials) -> Response:
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content={"success": False, "error": InvalidCredentials.message},
    )


def _validation_failed(request: Request, exc: ValidationFailed) -> Response:
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": exc.errors},
    )


def _request_validation_failed(request: Request, exc: RequestValidationError) -> Response:
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        field = location[-1].replace("_", " ").capitalize() if location else "Request"
        errors.append(f"{field} is invalid")
    return JSONResponse(
        status_code=422,
        content={"success": False, "error": errors},
    )


def _not_found(request: Request, exc: NotFound) -> Response:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "error": exc.message},
    )


def _forbidden(request: Request, exc: Forbidden) -> Response:
    return JSONResponse(
        status_code=status.HTTP_403_FORBIDDEN,
        content={"success": False, "error": exc.message},
    )


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TenantNotFound, tenant_not_found_response)
    app.add_exception_handler(SessionInvalid, _session_invalid)
    app.add_exception_handler(InvalidCredentials, _invalid_credentials)
    app.add_exception_handler(ValidationFailed, _validation_failed)
    app.add_exception_handler(RequestValidationError, _request_validation_failed)
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(Forbidden, _forbidden)
