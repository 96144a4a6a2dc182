"""LoadedCollection - the client-held, append-only result list."""

from collections.abc import Iterable, Iterator

from cardscope.domain.catalog.model.card import Card


class LoadedCollection:
    """Cards loaded so far for one filter state, deduplicated by ``card_id``.

    Merging is idempotent: a card whose id is already present is dropped and
    existing items never move.
    """

    def __init__(self) -> None:
        self._items: list[Card] = []
        self._ids: set[str] = set()
        self.total = 0
        self.total_known = False

    @property
    def items(self) -> tuple[Card, ...]:
        return tuple(self._items)

    @property
    def ids(self) -> list[str]:
        return [c.card_id for c in self._items]

    def merge(self, cards: Iterable[Card]) -> int:
        """Append unseen cards in order. Returns how many were added."""
        added = 0
        for card in cards:
            if card.card_id in self._ids:
                continue
            self._ids.add(card.card_id)
            self._items.append(card)
            added += 1
        return added

    def observe_total(self, total: int) -> None:
        self.total = total
        self.total_known = True

    @property
    def complete(self) -> bool:
        """A count has been observed and everything it reported is loaded."""
        return self.total_known and len(self._items) >= self.total

    def clear(self) -> None:
        self._items.clear()
        self._ids.clear()
        self.total = 0
        self.total_known = False

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Card]:
        return iter(self._items)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._ids
