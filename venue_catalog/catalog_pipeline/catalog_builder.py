"""
Catalog Builder

Wires the fetcher, CSV parser, key normalizer and sanitizer into one load
operation and owns the generation bookkeeping:

    endpoint -> ResilientFetcher -> parse_rows -> normalize + sanitize -> Catalog

Every load is tagged with a monotonically increasing generation. A load
commits only if no newer load has started in the meantime; otherwise its
result is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Tuple

from ..core.config import CatalogConfig
from ..core.errors import FetchError
from .data_collection.csv_parser import RawRow, parse_rows
from .data_collection.fetcher import FetchResult, HttpSession, ResilientFetcher
from .preprocessing.key_normalizer import AliasResolver, normalize_key
from .preprocessing.sanitizer import RecordSanitizer

logger = logging.getLogger(__name__)

Record = Mapping[str, str]


@dataclass(frozen=True)
class Catalog:
    """Ordered, read-only records produced by one load generation."""

    generation: int
    records: Tuple[Record, ...] = ()
    source_url: str = ""

    @classmethod
    def empty(cls, generation: int = 0) -> "Catalog":
        return cls(generation=generation)

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)


class CatalogStore:
    """Holds the current catalog; only the latest started load may replace it."""

    def __init__(self) -> None:
        self._latest = 0
        self._current = Catalog.empty()

    @property
    def current(self) -> Catalog:
        return self._current

    @property
    def latest_generation(self) -> int:
        return self._latest

    def begin(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, generation: int) -> bool:
        return generation == self._latest

    def abandon(self, generation: int) -> bool:
        """Close out an interrupted load, keeping the records already committed.

        The current records are relabelled with ``generation`` so the store is
        consistent again without handing a generation number out twice.
        """
        if not self.is_current(generation):
            return False
        self._current = replace(self._current, generation=generation)
        logger.info("Load generation %d interrupted; keeping %d records", generation, len(self._current))
        return True

    def commit(self, catalog: Catalog) -> bool:
        if not self.is_current(catalog.generation):
            logger.info(
                "Discarding catalog from generation %d; generation %d superseded it",
                catalog.generation,
                self._latest,
            )
            return False
        self._current = catalog
        logger.info("Committed catalog generation %d with %d records", catalog.generation, len(catalog))
        return True


class CatalogBuilder:
    """Load the sheet and turn it into a committed ``Catalog``."""

    def __init__(
        self,
        config: Optional[CatalogConfig] = None,
        *,
        session: Optional[HttpSession] = None,
        store: Optional[CatalogStore] = None,
    ) -> None:
        self.config = config or CatalogConfig()
        self.store = store or CatalogStore()
        self._session = session

    def _fetcher(self, config: CatalogConfig) -> ResilientFetcher:
        return ResilientFetcher(config.rewrites, timeout_s=config.timeout_s, session=self._session)

    def normalize_row(self, raw: RawRow, sanitizer: RecordSanitizer) -> Record:
        record: Dict[str, str] = {}
        for header, value in raw.items():
            key = normalize_key(header)
            if not key:
                continue
            cleaned = sanitizer.sanitize(value)
            # "Brand Name" and "brand name" land on one key; keep the first value
            if key not in record or (cleaned and not record[key]):
                record[key] = cleaned
        return MappingProxyType(record)

    def build_records(self, text: str, config: Optional[CatalogConfig] = None) -> Tuple[Record, ...]:
        """Parse and clean a raw payload. Never raises."""
        config = config or self.config
        rows = parse_rows(text)
        if rows:
            shadowed = AliasResolver(config.aliases).shadowed(rows[0].keys())
            for target, keys in shadowed.items():
                logger.warning("Headers %s all resolve to %r; the first non-empty value wins", keys, target)
        sanitizer = RecordSanitizer(config.sentinels)
        return tuple(self.normalize_row(row, sanitizer) for row in rows)

    def _finish(self, generation: int, result: FetchResult, config: CatalogConfig) -> Optional[Catalog]:
        catalog = Catalog(
            generation=generation,
            records=self.build_records(result.text, config),
            source_url=result.url,
        )
        return catalog if self.store.commit(catalog) else None

    def _fail(self, generation: int, exc: FetchError) -> bool:
        """Drop the current catalog for a failed load; False if it was superseded."""
        if not self.store.is_current(generation):
            logger.info("Ignoring fetch failure from superseded generation %d: %s", generation, exc)
            return False
        self.store.commit(Catalog.empty(generation))
        return True

    def load(self, config: Optional[CatalogConfig] = None) -> Optional[Catalog]:
        """Fetch, parse and commit a new catalog.

        Returns the committed catalog, or ``None`` when a newer load started
        while this one was in flight.

        Raises:
            FetchError: every endpoint failed and this load is still the latest.
        """
        config = config or self.config
        generation = self.store.begin()
        try:
            result = self._fetcher(config).fetch(config.endpoint)
        except FetchError as exc:
            if self._fail(generation, exc):
                raise
            return None
        except BaseException:
            self.store.abandon(generation)
            raise
        return self._finish(generation, result, config)

    async def aload(self, config: Optional[CatalogConfig] = None) -> Optional[Catalog]:
        """Same as ``load`` but runs the blocking fetch in a worker thread."""
        config = config or self.config
        generation = self.store.begin()
        try:
            result = await asyncio.to_thread(self._fetcher(config).fetch, config.endpoint)
        except FetchError as exc:
            if self._fail(generation, exc):
                raise
            return None
        except BaseException:
            self.store.abandon(generation)
            raise
        return self._finish(generation, result, config)


def build_catalog(text: str, config: Optional[CatalogConfig] = None, *, generation: int = 0) -> Catalog:
    """Build a catalog from an already-fetched payload, outside any store."""
    builder = CatalogBuilder(config)
    return Catalog(generation=generation, records=builder.build_records(text))


__all__ = ["Catalog", "CatalogBuilder", "CatalogStore", "Record", "build_catalog"]
