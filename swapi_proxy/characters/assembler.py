"""
CharacterAssembler - resolves one character with its homeworld, cache first.
"""

import asyncio
from typing import Any

from loguru import logger
from pydantic import ValidationError

from swapi_proxy.characters.models import UNKNOWN, Character
from swapi_proxy.datasource.swapi import SwapiSource
from swapi_proxy.services.cache import CacheStore
from swapi_proxy.services.errors import UpstreamError

CHARACTER_TTL = 600  # seconds

UNKNOWN_HOMEWORLD: dict[str, Any] = {"name": UNKNOWN, "terrain": UNKNOWN}


def character_cache_key(uid: str) -> str:
    return f"entity_{uid}"


class CharacterAssembler:
    """
    Builds ``Character`` records from a person and the planet it references.

    A cache hit returns the stored character without any upstream call.
    On a miss the person is fetched, then its homeworld (if any), and the
    assembled character is cached for ``ttl`` seconds.

    With ``single_flight`` concurrent misses for the same uid share one
    fetch task; a caller that gets cancelled leaves the fetch running for
    the others. Without it every miss fetches and the last write wins.
    """

    def __init__(
        self,
        source: SwapiSource,
        cache: CacheStore,
        ttl: float = CHARACTER_TTL,
        single_flight: bool = False,
    ):
        self.source = source
        self.cache = cache
        self.ttl = ttl
        self.single_flight = single_flight
        self._in_flight: dict[str, asyncio.Task[Character]] = {}
        self.joined_fetches = 0

    async def resolve(self, uid: str) -> Character:
        """
        Resolve a character by uid.

        Raises:
            UpstreamError: If any upstream call fails or returns an
                unexpected payload.
        """
        cache_key = character_cache_key(uid)

        cached = await self.cache.get(cache_key)
        if cached is not None:
            logger.info(f"Cache hit for character {uid}")
            return cached

        if not self.single_flight:
            logger.warning(f"Cache miss for character {uid}")
            return await self._fetch_and_cache(uid, cache_key)

        task = self._in_flight.get(uid)
        if task is None:
            logger.warning(f"Cache miss for character {uid}")
            task = asyncio.create_task(self._fetch_and_cache(uid, cache_key))
            self._in_flight[uid] = task
            task.add_done_callback(lambda done: self._forget(uid, done))
        else:
            self.joined_fetches += 1
            logger.info(f"Joining in-flight fetch for character {uid}")

        return await asyncio.shield(task)

    @property
    def in_flight_count(self) -> int:
        return len(self._in_flight)

    async def cancel_in_flight(self) -> int:
        """Cancel every shared fetch still running. Returns how many."""
        tasks = list(self._in_flight.values())
        self._in_flight.clear()
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info(f"Cancelled {len(tasks)} in-flight character fetches")
        return len(tasks)

    def _forget(self, uid: str, task: asyncio.Task[Character]) -> None:
        if self._in_flight.get(uid) is task:
            del self._in_flight[uid]
        # every waiter may have been cancelled; mark the outcome as retrieved
        if not task.cancelled():
            task.exception()

    async def _fetch_and_cache(self, uid: str, cache_key: str) -> Character:
        try:
            character = await self._assemble(uid)
        except UpstreamError as e:
            logger.error(f"Failed to fetch character details for {uid}: {e}")
            raise

        await self.cache.set(cache_key, character, self.ttl)
        logger.info(f"Character {uid} cached successfully")
        return character

    async def _assemble(self, uid: str) -> Character:
        person = await self.source.fetch_person(uid)

        homeworld_url = person.get("homeworld")
        if homeworld_url:
            homeworld = await self.source.fetch_planet(homeworld_url)
        else:
            homeworld = UNKNOWN_HOMEWORLD

        try:
            return Character(
                uid=uid,
                name=person.get("name"),
                birth_year=person.get("birth_year"),
                homeworld=homeworld.get("name"),
                terrain=homeworld.get("terrain"),
            )
        except ValidationError as e:
            raise UpstreamError(
                f"Unexpected character payload for {uid}: {e.error_count()} errors",
                service_id=self.source.service_id,
            ) from e
