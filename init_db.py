#!/usr/bin/env python
"""
Initialize database tables from SQLAlchemy models.
Development only; use `alembic upgrade head` everywhere else.

Optionally seeds a tenant and prints a fresh access key:
    python init_db.py --tenant t1 --name "Example Store"
"""

import argparse
import asyncio
from pathlib import Path

from dotenv import load_dotenv

# Load .env file explicitly (override any existing env vars)
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path, override=True)

from siteindex.core.config import Settings  # noqa: E402
from siteindex.core.db import close_db, create_engine_from_settings, init_db  # noqa: E402
from siteindex.repositories.access_key_repository import AccessKeyRepository  # noqa: E402
from siteindex.repositories.query_executor import SQLAlchemyQueryExecutor  # noqa: E402


async def main(tenant_id: str | None, tenant_name: str | None) -> bool:
    settings = Settings()
    engine = create_engine_from_settings(settings)
    print(f"📝 Using database: {settings.database_url}")

    try:
        await init_db(engine)
        print("✅ Database tables created successfully!")

        if tenant_id:
            executor = SQLAlchemyQueryExecutor(engine)
            await executor.execute(
                "INSERT INTO tenants (id, name, created_at, updated_at) "
                "VALUES (:id, :name, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)",
                {"id": tenant_id, "name": tenant_name or tenant_id},
            )
            plain_key = await AccessKeyRepository(executor).issue(tenant_id)
            print(f"✅ Tenant {tenant_id} created. Access key (shown once): {plain_key}")
        return True
    except Exception as e:  # noqa: BLE001
        print(f"❌ Error initializing database: {e}")
        return False
    finally:
        await close_db(engine)


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--tenant", help="Seed a tenant with this id")
    parser.add_argument("--name", help="Display name for the seeded tenant")
    args = parser.parse_args()

    print("Initializing database...")
    success = asyncio.run(main(args.tenant, args.name))
    exit(0 if success else 1)
