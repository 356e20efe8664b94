"""
Venue Catalog package.

Loads a published venue spreadsheet into an in-memory catalog and serves
fuzzy search plus facet filtering over it. The modules live under
``venue_catalog.catalog_pipeline``; the session-level facade is
``venue_catalog.services.catalog_service``.
"""

from .core.config import CatalogConfig, Settings, settings
from .core.errors import AliasCollisionError, FetchError
from .catalog_pipeline.catalog_builder import Catalog, CatalogBuilder, CatalogStore, build_catalog
from .catalog_pipeline.data_collection.csv_parser import parse_rows
from .catalog_pipeline.data_collection.fetcher import ENDPOINT_REWRITES, ResilientFetcher
from .catalog_pipeline.preprocessing.key_normalizer import AliasResolver, normalize_key
from .catalog_pipeline.preprocessing.sanitizer import RecordSanitizer, sanitize
from .catalog_pipeline.search.facets import ALL_FACET, FacetEngine
from .catalog_pipeline.search.fuzzy_index import SearchIndex
from .catalog_pipeline.search.query_engine import QueryEngine
from .schemas.venue import Venue

__all__ = [
    "ALL_FACET",
    "AliasCollisionError",
    "AliasResolver",
    "Catalog",
    "CatalogBuilder",
    "CatalogConfig",
    "CatalogStore",
    "ENDPOINT_REWRITES",
    "FacetEngine",
    "FetchError",
    "QueryEngine",
    "RecordSanitizer",
    "ResilientFetcher",
    "SearchIndex",
    "Settings",
    "Venue",
    "build_catalog",
    "normalize_key",
    "parse_rows",
    "sanitize",
    "settings",
]
