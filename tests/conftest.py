import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("FF_ERROR_ALERTS", "false")
os.environ.setdefault("FF_SEED_DEFAULTS", "true")

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from liftlog.db import repo
from liftlog.db.models import Base


@pytest_asyncio.fixture
async def db():
    """Point the repository at a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    repo._engine = engine
    repo._session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield repo
    finally:
        await repo.close_db()
