#!/usr/bin/env python3
"""
Seed script: creates a demo tenant, admin user, and todos that fall inside the
due-soon and overdue reminder windows.
Run after migrations: python scripts/seed.py
"""

import asyncio
import os
import sys
from datetime import timedelta

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from teamtodo.auth.passwords import hash_password
from teamtodo.auth.session import SessionData
from teamtodo.config import settings
from teamtodo.storage.repositories import (
    create_tenant_with_admin,
    create_todo,
    get_user_by_email,
)
from teamtodo.utils.clock import utcnow

DEMO_EMAIL = "admin@demo.teamtodo.local"
DEMO_PASSWORD = "demo-password"  # Demo credentials - print these for user


async def seed():
    engine = create_async_engine(settings.database_url)
    async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with async_session() as session:
        if await get_user_by_email(session, DEMO_EMAIL):
            print("Demo user already exists, nothing to do.")
            await engine.dispose()
            return

        tenant, user = await create_tenant_with_admin(
            session, "Demo Tenant", DEMO_EMAIL, hash_password(DEMO_PASSWORD)
        )
        owner = SessionData(user_id=user.id, tenant_id=tenant.id)
        now = utcnow()
        await create_todo(session, owner, "Prepare quarterly report", due_date=now + timedelta(hours=30))
        await create_todo(session, owner, "Renew domain", due_date=now - timedelta(hours=3))
        await create_todo(session, owner, "Plan offsite")
        await session.commit()

    await engine.dispose()

    print("Seed complete!")
    print(f"Login: {DEMO_EMAIL} / {DEMO_PASSWORD}")
    print("Trigger reminders: curl -X POST http://localhost:8000/api/cron/reminders \\")
    print('  -H "Authorization: Bearer $CRON_SECRET"')


if __name__ == "__main__":
    asyncio.run(seed())
