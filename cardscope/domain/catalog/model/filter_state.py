"""Filter state and the parameter normalizer.

A FilterState is the unit of cache and restore keying: every filter-affecting
navigation produces one, and its canonical key is independent of parameter
order.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from functools import cached_property
from urllib.parse import parse_qsl, urlencode

PAGINATION_KEYS = frozenset({"offset", "limit", "page", "pageSize", "page_size"})
NAVIGATION_KEYS = frozenset({"from", "view"})
IGNORED_KEYS = PAGINATION_KEYS | NAVIGATION_KEYS

RawValue = str | int | float | Sequence[str] | None
RawParams = Mapping[str, RawValue] | Iterable[tuple[str, str]]


def _pairs(params: RawParams) -> Iterator[tuple[str, str]]:
    """Flatten a parameter map (or pair list) into trimmed, non-empty pairs.

    Only the first value of a repeated key is kept, in input order.
    """
    items = params.items() if isinstance(params, Mapping) else params
    seen: set[str] = set()
    for key, raw in items:
        if key in IGNORED_KEYS or raw is None or key in seen:
            continue
        values = raw if isinstance(raw, (list, tuple)) else [raw]
        for value in values:
            if value is None:
                continue
            value = str(value).strip()
            if value:
                seen.add(key)
                yield key, value
                break


def normalize(params: RawParams) -> str:
    """Canonicalize a raw parameter map into a stable key string.

    Drops pagination and navigation-only keys and blank values, keeps the
    first value of a repeated key, sorts the remaining pairs by key, and
    re-encodes them as a query string. Idempotent:
    ``normalize(parse_key(normalize(p))) == normalize(p)``, and equal to
    ``FilterState.from_params(p).canonical_key``.
    """
    return urlencode(sorted(_pairs(params)))


def parse_key(key: str) -> list[tuple[str, str]]:
    """Decode a canonical key back into its pairs."""
    return parse_qsl(key, keep_blank_values=False)


@dataclass(frozen=True, eq=False)
class FilterState:
    """Ordered facet-key -> raw-value mapping for one browse context.

    Equality and hashing follow the canonical key, so two states with the
    same entries in any order are equal.
    """

    entries: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_params(cls, params: RawParams) -> FilterState:
        """Build from raw params, keeping the first value of repeated keys."""
        return cls(entries=tuple(_pairs(params)))

    @classmethod
    def from_key(cls, key: str) -> FilterState:
        return cls.from_params(parse_key(key))

    @cached_property
    def canonical_key(self) -> str:
        return normalize(self.entries)

    def get(self, key: str, default: str | None = None) -> str | None:
        for k, v in self.entries:
            if k == key:
                return v
        return default

    def as_dict(self) -> dict[str, str]:
        return dict(self.entries)

    def __contains__(self, key: object) -> bool:
        return any(k == key for k, _ in self.entries)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterState):
            return NotImplemented
        return self.canonical_key == other.canonical_key

    def __hash__(self) -> int:
        return hash(self.canonical_key)

    def __repr__(self) -> str:
        return f"FilterState({self.canonical_key!r})"
