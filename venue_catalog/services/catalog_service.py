"""
Catalog Service Layer

Session-scoped facade over the catalog builder and query engine. It tracks
the load lifecycle (loading / error / records) the way a presentation layer
polls it, and swaps in a fresh query engine each time a newer catalog is
committed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, Union

from ..catalog_pipeline.catalog_builder import Catalog, CatalogBuilder, Record
from ..catalog_pipeline.data_collection.fetcher import HttpSession
from ..catalog_pipeline.search.facets import ALL_FACET
from ..catalog_pipeline.search.query_engine import QueryEngine
from ..core.config import CatalogConfig, settings
from ..core.errors import FetchError
from ..core.logger import get_logger
from ..schemas.venue import Venue

logger = get_logger("catalog_service")


@dataclass(frozen=True)
class LoadState:
    generation: int
    loading: bool
    error: str
    records: Tuple[Record, ...]
    source_url: str = ""


class CatalogService:
    """Owns one catalog-consuming context: at most one live load at a time."""

    def __init__(self, config: Optional[CatalogConfig] = None, *, session: Optional[HttpSession] = None) -> None:
        self._config = config or CatalogConfig.from_settings(settings)
        self._builder = CatalogBuilder(self._config, session=session)
        self._engine = QueryEngine(self._builder.store.current, self._config)
        self._loading = False
        self._error = ""

    @property
    def config(self) -> CatalogConfig:
        return self._config

    @property
    def catalog(self) -> Catalog:
        return self._builder.store.current

    @property
    def engine(self) -> QueryEngine:
        return self._engine

    @property
    def state(self) -> LoadState:
        catalog = self.catalog
        return LoadState(
            generation=catalog.generation,
            loading=self._loading,
            error=self._error,
            records=catalog.records,
            source_url=catalog.source_url,
        )

    def is_current(self, view: Union[int, QueryEngine, Catalog]) -> bool:
        generation = view if isinstance(view, int) else view.generation
        return self._builder.store.is_current(generation) and generation == self.catalog.generation

    def _start(self, config: CatalogConfig) -> None:
        self._config = config
        self._loading = True
        self._error = ""

    def _settle(self, generation: int, catalog: Optional[Catalog], error: Optional[FetchError]) -> None:
        if not self._builder.store.is_current(generation):
            return
        self._loading = False
        if error is not None:
            self._error = f"Could not load sheet. {error.message}"
            logger.error("Catalog load %d failed: %s", generation, error.message)
        # One engine per committed catalog, including the empty one a failure commits.
        self._engine = QueryEngine(self.catalog, self._config)

    def load(self, config: Optional[CatalogConfig] = None, *, raise_on_error: bool = True) -> LoadState:
        """Load (or reload) the catalog, superseding any load still in flight."""
        config = config or self._config
        self._start(config)
        generation = self._builder.store.latest_generation + 1
        try:
            catalog = self._builder.load(config)
        except FetchError as exc:
            self._settle(generation, None, exc)
            if raise_on_error:
                raise
            return self.state
        except BaseException:
            self._settle(generation, None, None)
            raise
        self._settle(generation, catalog, None)
        return self.state

    async def aload(self, config: Optional[CatalogConfig] = None, *, raise_on_error: bool = True) -> LoadState:
        config = config or self._config
        self._start(config)
        generation = self._builder.store.latest_generation + 1
        try:
            catalog = await self._builder.aload(config)
        except FetchError as exc:
            self._settle(generation, None, exc)
            if raise_on_error:
                raise
            return self.state
        except BaseException:
            self._settle(generation, None, None)
            raise
        self._settle(generation, catalog, None)
        return self.state

    def set_endpoint(self, endpoint: str, *, raise_on_error: bool = True) -> LoadState:
        """Point the service at another sheet and reload."""
        logger.info("Switching catalog endpoint to %s", endpoint)
        return self.load(self._config.with_endpoint(endpoint), raise_on_error=raise_on_error)

    # Query surface. All of it is synchronous and reads the committed snapshot only.

    def search(self, text: str) -> List[Record]:
        return self._engine.search(text)

    def list_facet_values(self, field: Optional[str] = None) -> List[str]:
        return self._engine.list_facet_values(field)

    def facet_options(self, field: Optional[str] = None) -> List[str]:
        """Facet values with the leading "all" option a picker needs."""
        return [ALL_FACET, *self.list_facet_values(field)]

    def filter_by_facet(self, records: Iterable[Record], field: str, value: str) -> List[Record]:
        return self._engine.filter_by_facet(records, field, value)

    def resolve(self, record: Record, field_name: str) -> str:
        return self._engine.resolve(record, field_name)

    def query(self, text: str = "", facet_value: str = ALL_FACET) -> List[Record]:
        return self._engine.query(text, facet_value)

    def venues(self, records: Iterable[Record]) -> List[Venue]:
        return [Venue.from_record(record, self._engine.resolver) for record in records]


catalog_service = CatalogService()
