from __future__ import annotations

import asyncio
import threading

import pytest

from conftest import PRIMARY_URL, FakeResponse, FakeSession, proxy_one
from venue_catalog.core.errors import FetchError
from venue_catalog.services.catalog_service import CatalogService


def _brands(records):
    return [r["brand_name"] for r in records]


def test_initial_state_is_empty(catalog_config):
    service = CatalogService(catalog_config, session=FakeSession())

    state = service.state
    assert state.generation == 0
    assert state.loading is False
    assert state.error == ""
    assert state.records == ()
    assert service.search("") == []
    assert service.facet_options() == ["all"]


def test_load_populates_state_and_queries(catalog_config, venues_csv):
    service = CatalogService(catalog_config, session=FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)}))

    state = service.load()

    assert state.generation == 1
    assert state.loading is False
    assert state.error == ""
    assert state.source_url == PRIMARY_URL
    assert len(state.records) == 4
    assert service.facet_options() == ["all", "London", "london", "Manchester", "Paris"]
    assert _brands(service.query("", "London")) == ["Acme Bistro", "Casa Verde"]
    assert _brands(service.search("bistro")) == ["Acme Bistro"]


def test_failed_load_sets_error_and_empties_catalog(catalog_config, venues_csv):
    session = FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)})
    service = CatalogService(catalog_config, session=session)
    service.load()

    session.responses = {}
    state = service.load(raise_on_error=False)

    assert state.loading is False
    assert state.error.startswith("Could not load sheet. unreachable: ")
    assert state.records == ()
    assert service.search("") == []


def test_failed_load_raises_by_default(catalog_config):
    service = CatalogService(catalog_config, session=FakeSession({PRIMARY_URL: FakeResponse(500)}))

    with pytest.raises(FetchError):
        service.load()
    assert service.state.error.startswith("Could not load sheet.")


def test_successful_reload_clears_previous_error(catalog_config, venues_csv):
    session = FakeSession()
    service = CatalogService(catalog_config, session=session)
    service.load(raise_on_error=False)

    session.responses = {proxy_one(PRIMARY_URL): FakeResponse(200, venues_csv)}
    state = service.load()

    assert state.error == ""
    assert len(state.records) == 4


def test_endpoint_change_supersedes_in_flight_load(catalog_config):
    other_url = "https://other.example/export.csv"
    session = FakeSession({other_url: FakeResponse(200, "brand_name,area_town_city\nNew Place,Leeds\n")})
    service = CatalogService(catalog_config, session=session)
    stale_engine = {}

    def slow_primary(url):
        stale_engine["engine"] = service.engine
        service.set_endpoint(other_url)
        return FakeResponse(200, "brand_name,area_town_city\nOld Place,York\n")

    session.responses[PRIMARY_URL] = slow_primary

    state = service.load()

    assert _brands(state.records) == ["New Place"]
    assert state.generation == 2
    assert service.config.endpoint == other_url
    assert service.facet_options() == ["all", "Leeds"]
    assert not service.is_current(stale_engine["engine"])
    assert service.is_current(service.engine)


def test_engine_is_rebuilt_for_each_catalog(catalog_config, venues_csv):
    session = FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)})
    service = CatalogService(catalog_config, session=session)

    service.load()
    first = service.engine
    service.load()

    assert service.engine is not first
    assert service.engine.generation == 2
    assert not service.is_current(first)
    assert not service.is_current(1)


def test_aload(catalog_config, venues_csv):
    service = CatalogService(catalog_config, session=FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)}))

    state = asyncio.run(service.aload())

    assert state.generation == 1
    assert len(service.search("")) == 4


def test_venue_projection(catalog_config):
    text = "\n".join(
        [
            "Brand Name,Slug,Area__Town__City,Address,Official Website,Search_Tags,iFrame URL,Logo URL",
            "Acme Bistro,acme,London,1 High St,https://acme.example,brunch| coffee ,,https://cdn.example/acme.png",
            ",blue-harbour,,,#N/A,,https://book.example/blue,",
            ",,,,,,,",
            "NULL,,,,,,,",
        ]
    )
    service = CatalogService(catalog_config, session=FakeSession({PRIMARY_URL: FakeResponse(200, text)}))
    service.load()

    acme, blue, unknown = service.venues(service.search(""))

    assert acme.brand == "Acme Bistro"
    assert acme.area == "London"
    assert acme.address == "1 High St"
    assert acme.website_url == "https://acme.example"
    assert acme.tags == ["brunch", "coffee"]
    assert acme.logo_url_full == "https://cdn.example/acme.png"
    assert acme.booking_widget_url == ""
    assert blue.brand == "blue-harbour"
    assert blue.website_url == ""
    assert blue.booking_widget_url == "https://book.example/blue"
    assert unknown.brand == "Unknown"
    assert unknown.tags == []


def test_resolve_passthrough(catalog_config):
    service = CatalogService(catalog_config, session=FakeSession())

    assert service.resolve({"region/country": "France"}, "region") == "France"
    assert service.filter_by_facet([{"region": "France"}], "region", "FRANCE") == [{"region": "France"}]


def test_cancelled_aload_settles_and_keeps_previous_records(catalog_config, venues_csv):
    release = threading.Event()

    def stalled(url):
        release.wait(5)
        return FakeResponse(200, "brand_name\nToo Late\n")

    session = FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)})
    service = CatalogService(catalog_config, session=session)
    service.load()
    session.responses[PRIMARY_URL] = stalled

    async def run():
        task = asyncio.ensure_future(service.aload())
        await asyncio.sleep(0.05)
        assert service.state.loading is True
        task.cancel()
        try:
            with pytest.raises(asyncio.CancelledError):
                await task
        finally:
            release.set()

    asyncio.run(run())

    state = service.state
    assert state.loading is False
    assert state.error == ""
    assert state.generation == 2
    assert len(state.records) == 4
    assert service.is_current(service.engine)
    assert _brands(service.search("bistro")) == ["Acme Bistro"]


def test_unexpected_session_error_still_settles(catalog_config, venues_csv):
    session = FakeSession({PRIMARY_URL: FakeResponse(200, venues_csv)})
    service = CatalogService(catalog_config, session=session)
    service.load()
    session.responses[PRIMARY_URL] = ValueError("boom")

    with pytest.raises(ValueError):
        service.load()

    state = service.state
    assert state.loading is False
    assert state.generation == 2
    assert len(state.records) == 4
    assert service.is_current(service.engine)

    session.responses[PRIMARY_URL] = FakeResponse(200, venues_csv)
    assert service.load().generation == 3
