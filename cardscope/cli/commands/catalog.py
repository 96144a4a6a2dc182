"""Catalog data commands."""

import asyncio
import json
import sys
from pathlib import Path

import cyclopts
from pydantic import ValidationError as PydanticValidationError

from cardscope.cli.console import get_console
from cardscope.config import Config
from cardscope.domain.catalog.model.card import Card
from cardscope.infrastructure.persistence.database import (
    create_db_engine,
    create_schema,
    replace_cards,
)

app = cyclopts.App(name="catalog", help="Catalog data commands")


async def _load(config: Config, cards: list[Card]) -> int:
    engine = create_db_engine(config)
    try:
        await create_schema(engine)
        return await replace_cards(engine, cards)
    finally:
        await engine.dispose()


@app.command
def load(file: Path) -> None:
    """Replace the SQL catalog with the cards in a JSON file.

    Args:
        file: JSON file holding a list of card objects.
    """
    console = get_console()
    config = Config()  # type: ignore[call-arg]

    try:
        rows = json.loads(file.read_text())
        cards = [Card.model_validate(row) for row in rows]
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        console.error(f"Could not read cards from {file}: {e}")
        sys.exit(1)

    count = asyncio.run(_load(config, cards))
    console.success(f"Loaded {count} cards into {config.database.url}")


@app.command
def check(file: Path) -> None:
    """Validate a card JSON file without loading it.

    Args:
        file: JSON file holding a list of card objects.
    """
    console = get_console()
    try:
        rows = json.loads(file.read_text())
        cards = [Card.model_validate(row) for row in rows]
    except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
        console.error(f"Invalid card file {file}: {e}")
        sys.exit(1)

    ids = [c.card_id for c in cards]
    duplicates = len(ids) - len(set(ids))
    if duplicates:
        console.error(f"{duplicates} duplicate card ids in {file}")
        sys.exit(1)
    console.success(f"{len(cards)} cards, ids unique")
