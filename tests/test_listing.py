"""Tests for CharacterListingService."""

import pytest

from swapi_proxy.characters import CharacterAssembler, CharacterListingService
from swapi_proxy.characters.models import CharacterListing
from swapi_proxy.services.cache import CacheManager
from swapi_proxy.services.errors import ListingError, UpstreamError


class TestPagedListing:
    """Listing without a name filter."""

    @pytest.mark.asyncio
    async def test_page_keeps_upstream_order_and_total_pages(
        self, listing_service
    ) -> None:
        listing = await listing_service.resolve_listing(1)

        assert [c.uid for c in listing.characters] == ["1", "2"]
        assert [c.name for c in listing.characters] == ["Luke Skywalker", "C-3PO"]
        assert listing.total_pages == 5

    @pytest.mark.asyncio
    async def test_page_is_memoized_forever(
        self, listing_service, fake_swapi, clock
    ) -> None:
        first = await listing_service.resolve_listing(1)
        calls_after_first = fake_swapi.call_count

        clock.advance(days=30)
        second = await listing_service.resolve_listing(1)

        assert second is first
        assert fake_swapi.call_count == calls_after_first

    @pytest.mark.asyncio
    async def test_non_list_results_fall_back_to_empty(
        self, listing_service, fake_swapi
    ) -> None:
        listing = await listing_service.resolve_listing(2)

        assert listing == CharacterListing(characters=[], total_pages=0)

        await listing_service.resolve_listing(2)
        assert fake_swapi.calls_to("/api/people") == 2

    @pytest.mark.asyncio
    async def test_empty_filter_uses_paged_path(self, listing_service) -> None:
        listing = await listing_service.resolve_listing(1, "")

        assert listing.total_pages == 5

    @pytest.mark.asyncio
    async def test_bounded_fanout_keeps_order(
        self, source, assembler, cache
    ) -> None:
        service = CharacterListingService(source, assembler, cache, fanout_limit=1)

        listing = await service.resolve_listing(1)

        assert [c.uid for c in listing.characters] == ["1", "2"]

    @pytest.mark.asyncio
    async def test_page_survives_a_full_cache(self, source, fake_swapi, clock) -> None:
        cache = CacheManager(max_size=5, clock=clock)
        assembler = CharacterAssembler(source, cache)
        service = CharacterListingService(source, assembler, cache)
        for n in range(20):
            fake_swapi.people[f"clone-{n}"] = {
                "name": f"Clone Trooper {n}",
                "birth_year": "unknown",
                "homeworld": "",
            }

        first = await service.resolve_listing(1)
        clock.advance(seconds=1)
        await service.resolve_listing(1, "Clone")
        calls_before = fake_swapi.call_count

        second = await service.resolve_listing(1)

        assert second is first
        assert fake_swapi.call_count == calls_before
        assert cache.get_stats().evictions > 0


class TestFilteredListing:
    """Listing with a name filter."""

    @pytest.mark.asyncio
    async def test_single_match(self, listing_service, assembler) -> None:
        listing = await listing_service.resolve_listing(1, "Luke")

        assert listing.total_pages == 1
        assert listing.characters == [await assembler.resolve("1")]

    @pytest.mark.asyncio
    async def test_many_matches_report_one_page(self, listing_service) -> None:
        listing = await listing_service.resolve_listing(1, "a")

        assert [c.uid for c in listing.characters] == ["1", "5"]
        assert listing.total_pages == 1

    @pytest.mark.asyncio
    async def test_no_match_returns_empty_listing(self, listing_service) -> None:
        listing = await listing_service.resolve_listing(1, "Jar Jar")

        assert listing == CharacterListing(characters=[], total_pages=0)

    @pytest.mark.asyncio
    async def test_search_is_idempotent_and_not_cached(
        self, listing_service, fake_swapi
    ) -> None:
        first = await listing_service.resolve_listing(1, "Leia")
        second = await listing_service.resolve_listing(1, "Leia")

        assert first == second
        assert fake_swapi.calls_to("/api/people/") == 2
        # characters themselves come from the entity cache the second time
        assert fake_swapi.calls_to("/api/people/5") == 1


class TestListingFailures:
    """Failures are reported as a single generic ListingError."""

    @pytest.mark.asyncio
    async def test_entity_failure_fails_whole_page(
        self, listing_service, fake_swapi, cache
    ) -> None:
        fake_swapi.failing_paths.add("/api/people/2")

        with pytest.raises(ListingError) as exc_info:
            await listing_service.resolve_listing(1)

        assert str(exc_info.value) == "Failed to fetch Star Wars characters"
        assert isinstance(exc_info.value.__cause__, UpstreamError)
        assert await cache.get("page_1") is None

    @pytest.mark.asyncio
    async def test_search_failure_is_wrapped(
        self, listing_service, fake_swapi
    ) -> None:
        fake_swapi.failing_paths.add("/api/people/")

        with pytest.raises(ListingError):
            await listing_service.resolve_listing(1, "Luke")

    @pytest.mark.asyncio
    async def test_page_request_failure_is_wrapped(self, listing_service) -> None:
        with pytest.raises(ListingError):
            await listing_service.resolve_listing(42)
