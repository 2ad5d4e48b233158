from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone

from helpdesk.core.config import LOG_LEVEL, SESSION_COOKIE_NAME
from helpdesk.core.request_context import get_request_id, get_tenant_id, get_user_id

_SENSITIVE_KEYS = ("password_confirmation", "password", "token", "secret", SESSION_COOKIE_NAME)
_BEARER_PATTERN = re.compile(r"(authorization\s*[:=]\s*bearer\s+)([^\s\"]+)", re.IGNORECASE)
_KEY_VALUE_PATTERN = re.compile(
    r"((?:%s)\s*[:=]\s*)([^\s\",;}]+)" % "|".join(re.escape(key) for key in _SENSITIVE_KEYS),
    re.IGNORECASE,
)

_IDENTITY_GETTERS = (
    ("request_id", get_request_id),
    ("tenant_id", get_tenant_id),
    ("user_id", get_user_id),
)
_REQUEST_FIELDS = ("endpoint", "method", "status_code", "duration_ms", "errors")


def mask_secrets(value: str) -> str:
    return _KEY_VALUE_PATTERN.sub(r"\1***", _BEARER_PATTERN.sub(r"\1***", value))


class JsonFormatter(logging.Formatter):
    """One JSON object per line, stamped with the identity of the active request.

    Values passed through ``extra`` win over the request context, so a log call
    made outside a request can still name a tenant explicitly.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
        }
        for field, getter in _IDENTITY_GETTERS:
            value = getattr(record, field, None)
            payload[field] = value if value is not None else getter()
        payload["module"] = record.name
        payload["message"] = mask_secrets(record.getMessage())

        for field in _REQUEST_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                payload[field] = value
        if record.exc_info:
            payload["exception"] = mask_secrets(self.formatException(record.exc_info))
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str = LOG_LEVEL) -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter("%(message)s"))

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(level)
