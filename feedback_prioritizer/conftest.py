"""Shared pytest fixtures."""
import os

# Must be set before config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AI_API_KEY"] = ""
os.environ["AI_PROVIDER_ENABLED"] = "true"

import pytest

from database import engine, get_db_session
from models import Base


@pytest.fixture
async def db_session():
    """Fresh in-memory schema per test."""
    # Each test runs in its own event loop; reconnect inside it
    await engine.dispose()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    async with get_db_session() as session:
        yield session
