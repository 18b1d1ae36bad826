#!/usr/bin/env python3
"""
Reset the local development database.

Drops every LiftLog table, recreates the schema and, when a user id is
given on the command line, seeds that user with the starter exercises and
Push/Pull templates:

    python scripts/reset_db.py dev-user
"""

import asyncio
import os
import sys

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./local_dev.db")

from liftlog.db import repo
from liftlog.db.models import Base


async def reset_database(seed_uid: str | None = None) -> None:
    """Drop and recreate all tables, then optionally seed one user."""
    print(f"🔄 Resetting database {repo.SETTINGS.DATABASE_URL} ...")
    await repo.init_db()
    engine = repo._engine
    if not engine:
        print("❌ Failed to initialize database engine")
        return

    try:
        async with engine.begin() as conn:
            print("🗑️  Dropping all tables...")
            await conn.run_sync(Base.metadata.drop_all)
            print("🏗️  Creating tables from models...")
            await conn.run_sync(Base.metadata.create_all)

        print("📊 Tables:")
        for name in sorted(Base.metadata.tables):
            print(f"   - {name}")

        if seed_uid:
            user = await repo.upsert_user(seed_uid)
            await repo.seed_user_data(user.id)
            print(f"🌱 Seeded user {seed_uid} (id={user.id})")
        print("✅ Database reset complete!")
    finally:
        await repo.close_db()


if __name__ == "__main__":
    asyncio.run(reset_database(sys.argv[1] if len(sys.argv) > 1 else None))
