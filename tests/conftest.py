from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, List, Union

import pytest
import requests


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from venue_catalog.core.config import CatalogConfig  # noqa: E402


PRIMARY_URL = "https://sheet.example/export?format=csv"


def proxy_one(url: str) -> str:
    return f"https://proxy-one.example/raw?url={url}"


def proxy_two(url: str) -> str:
    return f"https://proxy-two.example/{url}"


VENUES_CSV = "\n".join(
    [
        "brand_name,slug,area_town_city,location_address,website_url,tags,cuisine,region",
        'Acme Bistro,acme-bistro,London,1 High St,https://acme.example,"brunch, coffee",French,England',
        "Blue Harbour,blue-harbour,Manchester,2 Canal St,https://blue.example,seafood|cocktails,Seafood,England",
        "Casa Verde,casa-verde,london,3 Park Rd,#N/A,vegan,Mexican,England",
        "Dragon Gate,dragon-gate,Paris,4 Rue Neuve,https://dragon.example,dim sum,Chinese,France",
    ]
)


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.content = text.encode("utf-8")


Outcome = Union[FakeResponse, Exception, Callable[[str], FakeResponse]]


class FakeSession:
    """Stands in for requests.Session; unknown URLs fail with ConnectionError."""

    def __init__(self, responses: Dict[str, Outcome] | None = None) -> None:
        self.responses: Dict[str, Outcome] = dict(responses or {})
        self.calls: List[str] = []

    def get(self, url: str, **kwargs) -> FakeResponse:
        self.calls.append(url)
        outcome = self.responses.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"unreachable: {url}")
        if isinstance(outcome, Exception):
            raise outcome
        if callable(outcome):
            return outcome(url)
        return outcome


@pytest.fixture
def catalog_config() -> CatalogConfig:
    return CatalogConfig(endpoint=PRIMARY_URL, rewrites=(proxy_one, proxy_two), timeout_s=1.0)


@pytest.fixture
def venues_csv() -> str:
    return VENUES_CSV
