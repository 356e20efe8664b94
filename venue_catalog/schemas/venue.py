"""Pydantic view of a catalog record as a venue card consumes it."""

from __future__ import annotations

import re
from typing import List

from pydantic import BaseModel, Field

from ..catalog_pipeline.catalog_builder import Record
from ..catalog_pipeline.preprocessing.key_normalizer import AliasResolver

_TAG_SPLIT_RE = re.compile(r"[,|]")


def split_tags(raw: str) -> List[str]:
    return [tag.strip() for tag in _TAG_SPLIT_RE.split(raw or "") if tag.strip()]


class Venue(BaseModel):
    brand: str = Field(..., description="Display name; falls back to slug, then 'Unknown'")
    booking_widget_url: str = ""
    logo_url_full: str = ""
    favicon_url: str = ""
    address: str = ""
    website_url: str = ""
    menu_url: str = ""
    maps_url: str = ""
    area: str = ""
    cuisine: str = ""
    opening_hours: str = ""
    tags: List[str] = Field(default_factory=list)
    tripadvisor_url: str = ""

    @classmethod
    def from_record(cls, record: Record, resolver: AliasResolver) -> "Venue":
        g = lambda name: resolver.resolve(record, name)  # noqa: E731
        return cls(
            brand=g("brand_name") or g("slug") or "Unknown",
            booking_widget_url=g("booking_widget_url"),
            logo_url_full=g("logo_url_full"),
            favicon_url=g("favicon_url"),
            address=g("location_address"),
            website_url=g("website_url"),
            menu_url=g("menu_url"),
            maps_url=g("maps_url"),
            area=g("area_town_city"),
            cuisine=g("cuisine"),
            opening_hours=g("opening_hours"),
            tags=split_tags(g("tags")),
            tripadvisor_url=g("tripadvisor_url"),
        )


__all__ = ["Venue", "split_tags"]
