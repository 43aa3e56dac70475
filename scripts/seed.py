#!/usr/bin/env python3
"""
Seed script: creates (if needed) a demo tenant with users and customers.
Run after migrations: python scripts/seed.py [tenant-id]
"""

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fieldsmart.config import settings
from fieldsmart.database import Database
from fieldsmart.services.seed import DEMO_PASSWORD, SeedService

DEFAULT_TENANT_ID = "demo-tenant"


async def seed(tenant_id: str):
    database = Database(settings.database_url)
    try:
        async with database.session() as session:
            tenant, users_created, customers_created = await SeedService(
                session, settings.password_hash_salt
            ).seed(tenant_id)
    finally:
        await database.dispose()

    print(f"Tenant: {tenant.id} ({tenant.name}, slug {tenant.slug})")
    print(f"Users created: {users_created} (password: {DEMO_PASSWORD})")
    print(f"Customers created: {customers_created}")
    print(f"\nUse header X-Tenant-Id: {tenant.id}")


if __name__ == "__main__":
    asyncio.run(seed(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_TENANT_ID))
