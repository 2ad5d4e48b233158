from __future__ import annotations

import logging
import re
from urllib.parse import urlsplit

from sqlalchemy.orm import Session

from helpdesk.core.config import BASE_DOMAIN
from helpdesk.core.errors import TenantNotFound
from helpdesk.core.request_context import ResolvedTenant
from helpdesk.models.tenant import Tenant

logger = logging.getLogger(__name__)

SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?$")


def normalize_subdomain(value: str | None) -> str:
    return (value or "").strip().lower()


def is_valid_subdomain(value: str) -> bool:
    return bool(SUBDOMAIN_PATTERN.match(value or ""))


class TenantDirectory:
    """Resolve tenant identity from the request host's subdomain."""

    def __init__(self, db: Session, base_domain: str = BASE_DOMAIN) -> None:
        self.db = db
        self.base_domain = self.normalize_base_domain(base_domain)

    @staticmethod
    def normalize_host(host: str | None) -> str:
        normalized = (host or "").split(",")[0].strip().lower()
        if not normalized:
            return ""

        if "://" in normalized:
            return (urlsplit(normalized).hostname or "").lower()

        normalized = normalized.split("/")[0].strip()
        if ":" in normalized:
            normalized = normalized.split(":")[0].strip()
        return normalized.rstrip(".")

    @classmethod
    def normalize_base_domain(cls, base_domain: str | None) -> str:
        normalized = cls.normalize_host(base_domain or "")
        if normalized.startswith("*."):
            normalized = normalized[2:]
        return normalized.lstrip(".")

    def extract_subdomain(self, host: str | None) -> str:
        normalized_host = self.normalize_host(host)
        if not normalized_host or not self.base_domain:
            raise TenantNotFound()

        suffix = f".{self.base_domain}"
        if not normalized_host.endswith(suffix):
            raise TenantNotFound()

        # Only the left-most label addresses the tenant: a.b.<base> -> "a".
        prefix = normalized_host[: -len(suffix)]
        subdomain = prefix.split(".")[0]
        if not is_valid_subdomain(subdomain):
            raise TenantNotFound()
        return subdomain

    def resolve(self, subdomain: str | None) -> ResolvedTenant:
        normalized = normalize_subdomain(subdomain)
        if not is_valid_subdomain(normalized):
            raise TenantNotFound()

        row = (
            self.db.query(Tenant.id, Tenant.subdomain)
            .filter(Tenant.subdomain == normalized)
            .first()
        )
        if row is None:
            logger.info("Tenant resolution failed subdomain=%s", normalized)
            raise TenantNotFound()
        return ResolvedTenant(id=int(row.id), subdomain=row.subdomain)

    def resolve_host(self, host: str | None) -> ResolvedTenant:
        return self.resolve(self.extract_subdomain(host))
