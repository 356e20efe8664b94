"""Configuration Management System

Provides the configuration for the venue catalog in two layers:

- ``Settings``: environment-driven values (pydantic-settings). Every field can
  be overridden through an environment variable of the same name, e.g.
  ``SHEET_CSV_URL`` or ``SEARCH_THRESHOLD``.
- ``CatalogConfig``: the explicit, immutable value handed to the catalog
  builder, fetcher and search layer. Tests construct it directly; the
  application builds it once from ``settings``.

Example:
    from venue_catalog.core.config import CatalogConfig, settings

    config = CatalogConfig.from_settings(settings)
    print(config.endpoint, config.search_threshold)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from pydantic_settings import BaseSettings

from ..catalog_pipeline.data_collection.fetcher import ENDPOINT_REWRITES
from ..catalog_pipeline.preprocessing.key_normalizer import build_alias_table, normalize_key
from ..catalog_pipeline.preprocessing.sanitizer import DEFAULT_SENTINELS

DEFAULT_SHEET_CSV_URL = (
    "https://docs.google.com/spreadsheets/d/1f6hQNKdqnth8BIATF8UR2TZ-TUWRPCitBCrTLTDeL1g"
    "/export?format=csv&gid=1694382803"
)

# Legacy header -> canonical key, accumulated across sheet revisions.
DEFAULT_KEY_ALIASES: Dict[str, str] = {
    "brand name": "brand_name",
    "official website": "website_url",
    "website url": "website_url",
    "maps url": "maps_url",
    "widget url (canonical)": "booking_widget_url",
    "iframe url": "booking_widget_url",
    "view url": "booking_widget_url",
    "logo url": "logo_url_full",
    "area__town__city": "area_town_city",
    "area/town/city": "area_town_city",
    "search_tags": "tags",
    "region/country": "region",
    "address": "location_address",
    "opening hours": "opening_hours",
}

DEFAULT_SEARCH_FIELDS: Tuple[str, ...] = (
    "brand_name",
    "slug",
    "area_town_city",
    "location_address",
    "website_url",
    "tags",
    "extra_tags",
    "cuisine",
    "opening_hours",
    "region",
)


class Settings(BaseSettings):
    """Configuration management service."""

    VERSION: str = "1.0.0"

    # Base directory for resolving relative paths
    BASE_DIR: Path = Path(__file__).parent.parent.parent

    LOG_DIR: str = "logs"  # Default if env var not set
    LOG_LEVEL: str = "INFO"  # Default log level
    LOG_FILE_NAME: str = "venue-catalog"  # <name>.log and <name>_daily.log
    LOG_MAX_BYTES: int = 10_000_000
    LOG_BACKUP_COUNT: int = 5
    LOG_RETENTION_DAYS: int = 30
    LOG_LEVELS: Dict[str, str] = {}  # per-logger overrides, e.g. {"catalog_service": "DEBUG"}

    # Data source
    SHEET_CSV_URL: str = DEFAULT_SHEET_CSV_URL
    PROXY_CHAIN: List[str] = ["jina", "allorigins"]
    FETCH_TIMEOUT_S: float = 20.0

    # Query behaviour
    SEARCH_THRESHOLD: float = 0.35
    FACET_FIELD: str = "area_town_city"

    def __init__(self, **kwargs):
        """Initialize settings and create required directories."""
        super().__init__(**kwargs)

        self.log_dir_path.mkdir(parents=True, exist_ok=True)

    @property
    def log_dir_path(self) -> Path:
        """Resolve log directory path.

        If LOG_DIR is absolute, uses it directly.
        If relative, resolves from BASE_DIR.
        """
        path = Path(self.LOG_DIR)
        return path if path.is_absolute() else self.BASE_DIR / path


@dataclass(frozen=True)
class CatalogConfig:
    """Everything the catalog needs to load and query one data source.

    ``rewrites`` are tried in order after the primary ``endpoint``; each one
    maps the primary URL to an alternate (typically a read-through proxy).
    ``aliases`` is normalized and validated on construction, so a bad table
    fails here instead of silently shadowing fields at query time.
    """

    endpoint: str = DEFAULT_SHEET_CSV_URL
    rewrites: Tuple[Callable[[str], str], ...] = (
        ENDPOINT_REWRITES["jina"],
        ENDPOINT_REWRITES["allorigins"],
    )
    timeout_s: float = 20.0
    sentinels: Tuple[str, ...] = DEFAULT_SENTINELS
    aliases: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_KEY_ALIASES))
    search_fields: Tuple[str, ...] = DEFAULT_SEARCH_FIELDS
    facet_field: str = "area_town_city"
    search_threshold: float = 0.35

    def __post_init__(self) -> None:
        if not 0.0 <= self.search_threshold <= 1.0:
            raise ValueError(f"search_threshold must be within [0, 1], got: {self.search_threshold}")
        # frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, "aliases", build_alias_table(self.aliases))
        object.__setattr__(self, "rewrites", tuple(self.rewrites))
        object.__setattr__(self, "sentinels", tuple(self.sentinels))
        object.__setattr__(self, "search_fields", tuple(normalize_key(f) for f in self.search_fields))
        object.__setattr__(self, "facet_field", normalize_key(self.facet_field))

    @classmethod
    def from_settings(cls, settings: "Settings", **overrides) -> "CatalogConfig":
        unknown = [name for name in settings.PROXY_CHAIN if name not in ENDPOINT_REWRITES]
        if unknown:
            raise ValueError(f"Unknown proxy rewrites in PROXY_CHAIN: {unknown}")
        values = {
            "endpoint": settings.SHEET_CSV_URL,
            "rewrites": tuple(ENDPOINT_REWRITES[name] for name in settings.PROXY_CHAIN),
            "timeout_s": settings.FETCH_TIMEOUT_S,
            "facet_field": settings.FACET_FIELD,
            "search_threshold": settings.SEARCH_THRESHOLD,
        }
        values.update(overrides)
        return cls(**values)

    def with_endpoint(self, endpoint: str, rewrites: Optional[Tuple[Callable[[str], str], ...]] = None) -> "CatalogConfig":
        """Return a copy pointing at another data source."""
        return CatalogConfig(
            endpoint=endpoint,
            rewrites=self.rewrites if rewrites is None else rewrites,
            timeout_s=self.timeout_s,
            sentinels=self.sentinels,
            aliases=self.aliases,
            search_fields=self.search_fields,
            facet_field=self.facet_field,
            search_threshold=self.search_threshold,
        )


# Initialize global settings
settings = Settings()
