from abc import abstractmethod
from typing import Protocol

from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.catalog.model.filter_state import FilterState
from cardscope.domain.shared.port import Port


class BatchFetcher(Port, Protocol):
    """Fetches one page of a filter state's results.

    Failures surface as ExecutionError.
    """

    @abstractmethod
    async def fetch(self, state: FilterState, offset: int, limit: int) -> CardPage: ...
