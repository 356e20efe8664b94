"""
Fuzzy Search Index

Approximate matching over a fixed set of searchable fields. Scores follow
the Fuse.js convention the front-end was tuned with: 0.0 is a perfect match,
1.0 matches anything, and a record is kept when its best field score is at or
below the configured threshold.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import List, Sequence, Tuple

from rapidfuzz import fuzz

from ..catalog_builder import Catalog, Record
from ..preprocessing.key_normalizer import AliasResolver


class _QueryCache:
    def __init__(self, *, max_items: int) -> None:
        self._max = max_items
        self._items: OrderedDict[str, Tuple[int, ...]] = OrderedDict()

    def get(self, key: str) -> Tuple[int, ...] | None:
        value = self._items.get(key)
        if value is not None:
            self._items.move_to_end(key)
        return value

    def set(self, key: str, value: Tuple[int, ...]) -> None:
        self._items[key] = value
        self._items.move_to_end(key)
        while len(self._items) > self._max:
            self._items.popitem(last=False)


def field_similarity(query: str, value: str, score_cutoff: float = 0.0) -> float:
    """Similarity in [0, 100] between a casefolded query and field value."""
    if not query or not value:
        return 0.0
    # partial_ratio would score a long query 100 against any one-letter value
    if len(query) <= len(value):
        return fuzz.partial_ratio(query, value, score_cutoff=score_cutoff)
    return fuzz.ratio(query, value, score_cutoff=score_cutoff)


class SearchIndex:
    """Read-only index over one catalog generation."""

    def __init__(
        self,
        catalog: Catalog,
        fields: Sequence[str],
        resolver: AliasResolver,
        *,
        threshold: float = 0.35,
        cache_size: int = 256,
    ) -> None:
        self._catalog = catalog
        self._fields = tuple(fields)
        self._threshold = threshold
        self._entries: List[Tuple[str, ...]] = [
            tuple(v.casefold() for v in (resolver.resolve(record, f) for f in self._fields) if v)
            for record in catalog.records
        ]
        self._cache = _QueryCache(max_items=cache_size)

    @property
    def generation(self) -> int:
        return self._catalog.generation

    @property
    def fields(self) -> Tuple[str, ...]:
        return self._fields

    def score(self, query: str, position: int) -> float:
        """Best (lowest) score of the record at ``position`` for ``query``."""
        q = query.strip().casefold()
        best = max((field_similarity(q, value) for value in self._entries[position]), default=0.0)
        return 1.0 - best / 100.0

    def _rank(self, q: str) -> Tuple[int, ...]:
        cutoff = (1.0 - self._threshold) * 100.0
        scored: List[Tuple[float, int]] = []
        for position, values in enumerate(self._entries):
            best = max((field_similarity(q, value, cutoff) for value in values), default=0.0)
            score = 1.0 - best / 100.0
            if score <= self._threshold:
                scored.append((score, position))
        scored.sort()
        return tuple(position for _score, position in scored)

    def search(self, query: str) -> List[Record]:
        """Ranked matches, closest first; ties keep catalog order."""
        q = (query or "").strip().casefold()
        records = self._catalog.records
        if not q:
            return list(records)
        positions = self._cache.get(q)
        if positions is None:
            positions = self._rank(q)
            self._cache.set(q, positions)
        return [records[i] for i in positions]


__all__ = ["SearchIndex", "field_similarity"]
