"""Custom Dishka scopes for cardscope."""

from dishka import BaseScope, new_scope


class Scope(BaseScope):  # type: ignore[misc]  # BaseScope is designed to be subclassed
    """cardscope dependency injection scopes.

    Hierarchy: APP -> UOW

    - APP: Application lifetime (engine, card source, page cache)
    - UOW: Unit of Work (one HTTP request)
    """

    APP = new_scope("APP")
    UOW = new_scope("UOW")
