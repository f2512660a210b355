"""
CharacterListingService - pages and name searches over the character catalog.
"""

import asyncio
from typing import Any

from loguru import logger

from swapi_proxy.characters.assembler import CharacterAssembler
from swapi_proxy.characters.models import Character, CharacterListing
from swapi_proxy.datasource.swapi import SwapiSource
from swapi_proxy.services.cache import NO_EXPIRY, CacheStore
from swapi_proxy.services.errors import ListingError


def page_cache_key(page: int) -> str:
    return f"page_{page}"


class CharacterListingService:
    """
    Resolves listings by fanning out to the ``CharacterAssembler``.

    Pages are cached forever once resolved; searches are never cached.
    Every character of a listing is resolved concurrently and the listing
    fails as a whole if any one of them fails.
    """

    def __init__(
        self,
        source: SwapiSource,
        assembler: CharacterAssembler,
        cache: CacheStore,
        fanout_limit: int = 0,
    ):
        self.source = source
        self.assembler = assembler
        self.cache = cache
        # 0 keeps the fan-out unbounded
        self.fanout_limit = fanout_limit

    async def resolve_listing(
        self,
        page: int,
        name_filter: str | None = None,
    ) -> CharacterListing:
        """
        Resolve a page of characters, or a name search when a filter is set.

        Raises:
            ListingError: On any failure; the cause is logged and chained.
        """
        try:
            if name_filter:
                return await self.resolve_filtered_listing(name_filter)
            return await self.resolve_paged_listing(page)
        except Exception as e:
            logger.error(f"Failed to fetch Star Wars characters: {e}")
            raise ListingError(service_id=self.source.service_id) from e

    async def resolve_filtered_listing(self, name: str) -> CharacterListing:
        """Search characters by name; always one page when anything matches."""
        results = await self.source.search_people(name)

        if isinstance(results, list) and results:
            characters = await self._resolve_all(results)
            logger.info(f"Search '{name}' matched {len(characters)} characters")
            return CharacterListing(characters=characters, total_pages=1)

        logger.info(f"Search '{name}' matched no characters")
        return CharacterListing.empty()

    async def resolve_paged_listing(self, page: int) -> CharacterListing:
        cache_key = page_cache_key(page)
        logger.info(f"Attempting to get characters from cache with key: {cache_key}")

        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for page {page}")
            return cached

        logger.warning(f"Cache miss for page {page}")
        payload = await self.source.fetch_people_page(page)

        results = payload.get("results")
        if not isinstance(results, list):
            logger.warning(f"Page {page} returned no result list")
            return CharacterListing.empty()

        characters = await self._resolve_all(results)
        listing = CharacterListing(
            characters=characters,
            total_pages=payload.get("total_pages") or 0,
        )

        await self.cache.set(cache_key, listing, NO_EXPIRY)
        logger.info(f"Page {page} cached successfully")
        return listing

    async def _resolve_all(self, matches: list[dict[str, Any]]) -> list[Character]:
        """Resolve every match concurrently, keeping upstream order."""
        uids = [str(match["uid"]) for match in matches]

        if self.fanout_limit > 0:
            semaphore = asyncio.Semaphore(self.fanout_limit)

            async def bounded(uid: str) -> Character:
                async with semaphore:
                    return await self.assembler.resolve(uid)

            return list(await asyncio.gather(*(bounded(uid) for uid in uids)))

        return list(await asyncio.gather(*(self.assembler.resolve(uid) for uid in uids)))
