"""Card records and result pages."""

from typing import Any

from pydantic import BaseModel, ConfigDict

from cardscope.domain.shared.model.value import ValueObject


class Card(BaseModel):
    """An opaque catalog record.

    Only ``card_id`` is interpreted: it is the dedupe and scroll-anchor key.
    Every other attribute passes through unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    card_id: str

    def value(self, field: str) -> Any:
        """Return an attribute by name, None when the record lacks it."""
        if field == "card_id":
            return self.card_id
        return (self.model_extra or {}).get(field)


class CardPage(ValueObject):
    """One window of results plus the count of the whole filtered set."""

    items: tuple[Card, ...] = ()
    total: int = 0


_DASHES = str.maketrans(dict.fromkeys("‐‑‒–—―−", "-"))


def normalize_card_id(raw: str) -> str:
    """Canonical card id: trimmed, upper-cased, unicode dashes as ``-``."""
    return raw.strip().translate(_DASHES).upper()
