"""
Database seeding script for the demo network.

Creates a passenger, a driver, two routes, two vehicles and two weekday
schedules. Run this script after the database is set up.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from omnibus.app.core.jwt import create_user_token
from omnibus.app.db.session import AsyncSessionLocal, engine, Base
from omnibus.app.models.user import User
from omnibus.app.main import app  # noqa: F401  registers all models
from omnibus.app.services.reference_data import seed_demo_data


async def seed():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting demo data seeding...")
        created = await seed_demo_data(db)
        result = await db.execute(
            select(User).where(User.username.in_(["john_doe", "driver_mike"])).order_by(User.id)
        )
        users = list(result.scalars().all())

    if created:
        print("\n🎉 Demo data seeding completed successfully!")
    else:
        print("ℹ️  Demo data already exists, skipping seeding")
    print("\nSeeded users (vehicles BUS-247, BUS-358 belong to driver_mike):")
    for user in users:
        print(f"  - {user.user_type.value.upper():<10} {user.username}")

    print("\nDevelopment tokens (production tokens come from the identity provider):")
    for user in users:
        print(f"  {user.username}: {create_user_token(user)}")


if __name__ == "__main__":
    asyncio.run(seed())
