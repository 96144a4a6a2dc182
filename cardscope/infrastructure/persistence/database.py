"""Database engine creation and card loading."""

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from sqlalchemy import delete, insert
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import StaticPool

from cardscope.config import Config
from cardscope.domain.catalog.model.card import Card
from cardscope.infrastructure.persistence.tables import cards_table, metadata

logger = logging.getLogger(__name__)


def _expand_sqlite_path(url: str) -> str:
    """Expand ~ in SQLite file URLs and ensure the parent directory exists."""
    if not url.startswith("sqlite") or ":memory:" in url or "///" not in url:
        return url

    prefix_end = url.index("///") + 3
    prefix = url[:prefix_end]
    abs_path = os.path.abspath(os.path.expanduser(url[prefix_end:]))
    Path(abs_path).parent.mkdir(parents=True, exist_ok=True)
    return f"{prefix}{abs_path}"


def create_db_engine(config: Config) -> AsyncEngine:
    """Create async database engine.

    Handles SQLite and PostgreSQL with appropriate settings.
    """
    url = _expand_sqlite_path(config.database.url)

    if url.startswith("sqlite"):
        engine_kwargs: dict[str, Any] = {
            "echo": config.database.echo,
            # One shared connection, required for aiosqlite and in-memory databases
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    else:
        engine_kwargs = {
            "echo": config.database.echo,
            "pool_pre_ping": True,
            "pool_size": 5,
            "max_overflow": 10,
        }

    return create_async_engine(url, **engine_kwargs)


async def create_schema(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)


def card_to_row(card: Card) -> dict[str, Any]:
    """Split a card into column values and the ``extra`` JSON remainder."""
    data = card.model_dump()
    columns = set(cards_table.c.keys())
    # Every row carries every column so rows can share one executemany
    row = {c: data.get(c) for c in columns if c != "extra"}
    row["xp_is_variable"] = bool(row["xp_is_variable"])
    extra = {k: v for k, v in data.items() if k not in columns}
    row["extra"] = extra or None
    return row


def row_to_card(row: dict[str, Any]) -> Card:
    data = dict(row)
    extra = data.pop("extra", None) or {}
    return Card.model_validate({**extra, **data})


async def replace_cards(engine: AsyncEngine, cards: Iterable[Card]) -> int:
    """Replace the whole catalog. Returns the number of cards written."""
    rows = [card_to_row(c) for c in cards]
    async with engine.begin() as conn:
        await conn.execute(delete(cards_table))
        if rows:
            await conn.execute(insert(cards_table), rows)
    logger.info("Loaded %d cards", len(rows))
    return len(rows)
