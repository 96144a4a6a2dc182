from abc import abstractmethod
from typing import Protocol

from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.shared.port import Port


class PageCache(Port, Protocol):
    """Process-lifetime page cache keyed by canonical key and page window."""

    @abstractmethod
    def get(self, key: str) -> CardPage | None: ...

    @abstractmethod
    def put(self, key: str, page: CardPage) -> None: ...

    @abstractmethod
    def clear(self) -> None: ...
