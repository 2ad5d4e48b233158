#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from helpdesk.core.database import SessionLocal, init_db  # noqa: E402
from helpdesk.core.errors import ValidationFailed  # noqa: E402
from helpdesk.services.tenant_provisioning import provision_tenant  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create a tenant and its first admin user.")
    parser.add_argument("--name", required=True, help="Tenant display name (unique)")
    parser.add_argument("--subdomain", required=True, help="Tenant subdomain (unique)")
    parser.add_argument("--admin-email", required=True, help="Email of the tenant admin")
    parser.add_argument("--admin-password", required=True, help="Password of the tenant admin")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    init_db()

    db = SessionLocal()
    try:
        tenant, admin = provision_tenant(
            db,
            name=args.name,
            subdomain=args.subdomain,
            admin_email=args.admin_email,
            admin_password=args.admin_password,
        )
        summary = [
            f"Tenant created: id={tenant.id} subdomain={tenant.subdomain}",
            f"Admin created: tenant={admin.tenant_id} email={admin.email}",
        ]
    except ValidationFailed as exc:
        for error in exc.errors:
            print(error)
        return 1
    finally:
        db.close()

    for line in summary:
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
