"""Scroll restoration records and viewport geometry."""

from collections.abc import Sequence
from enum import StrEnum

from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel

from cardscope.domain.shared.model.value import ValueObject


class ScrollRestoreRecord(ValueObject):
    """Where the user was in a result list, keyed by canonical filter key.

    Stored as camelCase JSON in the session store.
    """

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    canonical_key: str
    scroll_offset: float = Field(ge=0, allow_inf_nan=False)
    loaded_count: int = Field(gt=0)
    anchor_card_id: str | None = None
    anchor_pixel_offset: float | None = Field(default=None, allow_inf_nan=False)


class RestoreOutcome(StrEnum):
    NONE = "none"  # nothing remembered, first batch loaded
    ANCHORED = "anchored"
    RAW_OFFSET = "raw-offset"  # anchor missing, remembered offset applied
    STALE = "stale"  # filter state changed before the restore finished


class Viewport(ValueObject):
    """Visible band of the scroll container, in the same coordinates as nodes."""

    top: float
    bottom: float


class RenderedNode(ValueObject):
    card_id: str
    top: float
    bottom: float

    def intersects(self, viewport: Viewport) -> bool:
        return self.bottom > viewport.top and self.top < viewport.bottom


def find_anchor(nodes: Sequence[RenderedNode], viewport: Viewport) -> RenderedNode | None:
    """First rendered node whose box intersects the viewport."""
    return next((n for n in nodes if n.intersects(viewport)), None)
