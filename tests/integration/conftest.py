"""Fixtures for PostgreSQL integration tests."""

import os

import pytest
import pytest_asyncio
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import create_async_engine

from cardscope.infrastructure.persistence.database import create_schema
from cardscope.infrastructure.persistence.tables import cards_table


def _get_pg_url() -> str:
    url = os.environ.get("CARDSCOPE_DATABASE__URL", "")
    if "postgresql" not in url:
        pytest.skip("CARDSCOPE_DATABASE__URL not set to PostgreSQL")
    return url


@pytest_asyncio.fixture
async def pg_engine():
    """Per-test async engine with the cards table emptied afterwards."""
    url = _get_pg_url()
    engine = create_async_engine(url, pool_pre_ping=True)
    await create_schema(engine)
    yield engine

    async with engine.begin() as conn:
        await conn.execute(delete(cards_table))
    await engine.dispose()
