from cardscope.domain.catalog.model.card import CardPage
from cardscope.domain.catalog.port.page_cache import PageCache


class InMemoryPageCache(PageCache):
    """Eviction-free page cache for the process lifetime."""

    def __init__(self) -> None:
        self._pages: dict[str, CardPage] = {}

    def get(self, key: str) -> CardPage | None:
        return self._pages.get(key)

    def put(self, key: str, page: CardPage) -> None:
        self._pages[key] = page

    def clear(self) -> None:
        self._pages.clear()

    def __len__(self) -> int:
        return len(self._pages)
