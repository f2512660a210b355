"""
Pytest fixtures: an in-memory fake of the swapi.tech API.

The fake is served through ``httpx.MockTransport`` so every layer above the
transport runs for real, and each request is recorded for call counting.
"""

from datetime import datetime, timedelta

import httpx
import pytest

from swapi_proxy.characters import CharacterAssembler, CharacterListingService
from swapi_proxy.datasource.swapi import SwapiSource
from swapi_proxy.services.cache import CacheManager
from swapi_proxy.services.client import UpstreamClient

BASE_URL = "https://swapi.test/api"


class FakeSwapi:
    """Minimal swapi.tech stand-in backed by dicts."""

    def __init__(self):
        self.people: dict[str, dict] = {
            "1": {
                "name": "Luke Skywalker",
                "birth_year": "19BBY",
                "homeworld": f"{BASE_URL}/planets/1",
            },
            "2": {
                "name": "C-3PO",
                "birth_year": "112BBY",
                "homeworld": f"{BASE_URL}/planets/1",
            },
            "3": {"name": "R2-D2", "birth_year": "33BBY", "homeworld": ""},
            "5": {
                "name": "Leia Organa",
                "birth_year": "19BBY",
                "homeworld": f"{BASE_URL}/planets/2",
            },
        }
        self.planets: dict[str, dict] = {
            "1": {"name": "Tatooine", "terrain": "desert"},
            "2": {"name": "Alderaan", "terrain": "grasslands, mountains"},
        }
        self.pages: dict[str, dict] = {
            "1": {"total_pages": 5, "results": [{"uid": "1"}, {"uid": "2"}]},
            "2": {"total_pages": 5, "results": None},
        }
        self.failing_paths: set[str] = set()
        self.requests: list[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def calls_to(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        params = request.url.params

        if path in self.failing_paths:
            raise httpx.ConnectError("connection refused", request=request)

        if path.rstrip("/") == "/api/people" and "name" in params:
            needle = params["name"].lower()
            matches = [
                {"uid": uid, "properties": props}
                for uid, props in self.people.items()
                if needle in props["name"].lower()
            ]
            return httpx.Response(200, json={"message": "ok", "result": matches})

        if path == "/api/people":
            page = self.pages.get(params.get("page", "1"))
            if page is None:
                return httpx.Response(404, json={"message": "not found"})
            return httpx.Response(200, json={"message": "ok", **page})

        for collection, records in (("people", self.people), ("planets", self.planets)):
            prefix = f"/api/{collection}/"
            if path.startswith(prefix):
                record = records.get(path[len(prefix):])
                if record is None:
                    return httpx.Response(404, json={"message": "not found"})
                return httpx.Response(
                    200, json={"message": "ok", "result": {"properties": record}}
                )

        return httpx.Response(404, json={"message": "not found"})


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def fake_swapi():
    return FakeSwapi()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return CacheManager(max_size=100, clock=clock)


@pytest.fixture
def upstream_client(fake_swapi):
    return UpstreamClient(service_id="swapi", transport=fake_swapi.transport)


@pytest.fixture
def source(upstream_client):
    return SwapiSource(upstream_client, base_url=BASE_URL)


@pytest.fixture
def assembler(source, cache):
    return CharacterAssembler(source, cache)


@pytest.fixture
def listing_service(source, assembler, cache):
    return CharacterListingService(source, assembler, cache)
