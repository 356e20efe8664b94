"""Exact-match facet enumeration and filtering."""

from __future__ import annotations

from typing import Iterable, List

from ..catalog_builder import Catalog, Record
from ..preprocessing.key_normalizer import AliasResolver

# Selecting this value means "no filter". Callers prepend it to facet lists.
ALL_FACET = "all"


class FacetEngine:
    def __init__(self, catalog: Catalog, resolver: AliasResolver) -> None:
        self._catalog = catalog
        self._resolver = resolver

    @property
    def generation(self) -> int:
        return self._catalog.generation

    def distinct_values(self, field: str) -> List[str]:
        """Distinct non-empty values of ``field``, sorted case-insensitively."""
        values = {self._resolver.resolve(record, field) for record in self._catalog.records}
        values.discard("")
        return sorted(values, key=lambda v: (v.casefold(), v))

    def filter(self, records: Iterable[Record], field: str, selected_value: str) -> List[Record]:
        """Keep records whose ``field`` equals ``selected_value`` ignoring case."""
        if selected_value == ALL_FACET:
            return list(records)
        wanted = (selected_value or "").strip().casefold()
        return [r for r in records if self._resolver.resolve(r, field).casefold() == wanted]


__all__ = ["ALL_FACET", "FacetEngine"]
