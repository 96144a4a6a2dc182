"""Filter inspection and browsing commands.

Filters are given as ``key=value`` arguments, e.g.
``cardscope plan cost_min=2 keywords_inc=Guard sort_by=cost``.
"""

import asyncio
import os
import sys

import httpx

from cardscope.cli.console import get_console
from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.catalog.model.registry import default_registry
from cardscope.domain.catalog.service.compiler import FacetCompiler
from cardscope.domain.shared.error import ExecutionError
from cardscope.infrastructure.http.card_client import HttpBatchFetcher

CARD_COLUMNS = [
    ("card_id", "ID"),
    ("name", "Name"),
    ("set", "Set"),
    ("cost", "Cost"),
    ("xp_value", "XP"),
]


def get_server_url() -> str:
    return os.environ.get("CARDSCOPE_SERVER", "http://localhost:8000")


def parse_pairs(args: tuple[str, ...]) -> list[tuple[str, str]]:
    """Parse ``key=value`` arguments; exits on malformed input."""
    pairs = []
    for arg in args:
        name, sep, value = arg.partition("=")
        if not sep or not name:
            get_console().error(f"Expected key=value, got {arg!r}")
            sys.exit(1)
        pairs.append((name, value))
    return pairs


def key(*params: str) -> None:
    """Print the canonical key of a filter state.

    Args:
        params: Filter parameters as key=value.
    """
    get_console().print(FilterState.from_params(parse_pairs(params)).canonical_key, markup=False)


def plan(*params: str, offset: int = 0, limit: int = 72) -> None:
    """Print the query plan compiled from a filter state.

    Args:
        params: Filter parameters as key=value.
        offset: Page offset.
        limit: Page size.
    """
    console = get_console()
    state = FilterState.from_params(parse_pairs(params))
    compiled = FacetCompiler(registry=default_registry()).compile(state, offset=offset, limit=limit)
    console.info(f"key: {state.canonical_key or '(empty)'}")
    console.print_lines(compiled.describe())


async def _fetch(server: str, state: FilterState, offset: int, limit: int) -> CardPage:
    async with httpx.AsyncClient(base_url=server, timeout=10.0) as client:
        return await HttpBatchFetcher(client).fetch(state, offset, limit)


def cards(*params: str, offset: int = 0, limit: int = 24, server: str | None = None) -> None:
    """Fetch one page of cards from a running server.

    Args:
        params: Filter parameters as key=value.
        offset: Page offset.
        limit: Page size.
        server: Server URL. Defaults to $CARDSCOPE_SERVER or http://localhost:8000.
    """
    console = get_console()
    server_url = server or get_server_url()
    state = FilterState.from_params(parse_pairs(params))

    try:
        page = asyncio.run(_fetch(server_url, state, offset, limit))
    except ExecutionError as e:
        console.error(e.message, hint="Is the server running? Start it with: cardscope serve")
        sys.exit(1)

    rows = [card.model_dump() for card in page.items]
    shown = f"{offset + 1}-{offset + len(rows)}" if rows else "0"
    console.table(
        rows,
        CARD_COLUMNS,
        title=f"Cards {shown} of {page.total}",
        numbered=True,
        start=offset + 1,
    )
