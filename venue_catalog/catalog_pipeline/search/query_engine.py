"""
Query Engine

Search first, then narrow by facet. The facet step is an intersection: the
surviving records keep the relative ranking the fuzzy search gave them.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from ...core.config import CatalogConfig
from ..catalog_builder import Catalog, Record
from ..preprocessing.key_normalizer import AliasResolver
from .facets import ALL_FACET, FacetEngine
from .fuzzy_index import SearchIndex


class QueryEngine:
    """Synchronous, I/O-free queries over one catalog generation."""

    def __init__(self, catalog: Catalog, config: Optional[CatalogConfig] = None) -> None:
        config = config or CatalogConfig()
        self.catalog = catalog
        self.facet_field = config.facet_field
        self.resolver = AliasResolver(config.aliases)
        self.index = SearchIndex(
            catalog,
            config.search_fields,
            self.resolver,
            threshold=config.search_threshold,
        )
        self.facets = FacetEngine(catalog, self.resolver)

    @property
    def generation(self) -> int:
        return self.catalog.generation

    def search(self, text: str) -> List[Record]:
        return self.index.search(text)

    def list_facet_values(self, field: Optional[str] = None) -> List[str]:
        return self.facets.distinct_values(field or self.facet_field)

    def filter_by_facet(self, records: Iterable[Record], field: str, value: str) -> List[Record]:
        return self.facets.filter(records, field, value)

    def resolve(self, record: Record, field_name: str) -> str:
        return self.resolver.resolve(record, field_name)

    def query(self, text: str = "", facet_value: str = ALL_FACET, facet_field: Optional[str] = None) -> List[Record]:
        return self.filter_by_facet(self.search(text), facet_field or self.facet_field, facet_value)


__all__ = ["QueryEngine"]
