"""FastAPI server exposing the cached character catalog."""

from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from swapi_proxy.api.exceptions import InternalServerError
from swapi_proxy.characters import (
    CharacterAssembler,
    CharacterListing,
    CharacterListingService,
)
from swapi_proxy.datasource.swapi import SwapiSource
from swapi_proxy.services.cache import CacheManager
from swapi_proxy.services.client import UpstreamClient
from swapi_proxy.services.errors import ListingError
from swapi_proxy.settings import Settings, global_settings


class CharacterServer:
    """HTTP server for character listing requests."""

    def __init__(
        self,
        listing_service: CharacterListingService,
        cache: CacheManager,
        client: UpstreamClient,
        assembler: CharacterAssembler,
        api_prefix: str = "api",
        cors_origins: list[str] | None = None,
    ):
        self.listing_service = listing_service
        self.cache = cache
        self.client = client
        self.assembler = assembler

        self.app = FastAPI(title="SWAPI Proxy", lifespan=self.lifespan)
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins or ["*"],
            allow_methods=["GET"],
            allow_headers=["*"],
        )

        # Register routes
        prefix = f"/{api_prefix.strip('/')}" if api_prefix.strip("/") else ""
        self.app.get(f"{prefix}/characters", response_model=CharacterListing)(
            self.list_characters
        )
        self.app.get("/health")(self.health_check)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        logger.info("SWAPI proxy starting")
        yield
        await self.assembler.cancel_in_flight()
        await self.client.close()
        logger.info("SWAPI proxy stopped")

    async def list_characters(
        self,
        page: int = Query(1, ge=1),
        filter: Optional[str] = Query(None),
    ) -> CharacterListing:
        """Handle a character listing request.

        Args:
            page: Page number, starting at 1
            filter: Optional (partial) name to search for

        Returns:
            The resolved listing
        """
        try:
            return await self.listing_service.resolve_listing(page, filter)
        except ListingError as e:
            raise InternalServerError(detail=str(e)) from e

    async def health_check(self):
        """Health check endpoint."""
        status = {
            "status": "ok",
            "service": "swapi-proxy",
            "cache": self.cache.get_stats().to_dict(),
        }
        if self.assembler.single_flight:
            status["single_flight"] = {
                "in_flight": self.assembler.in_flight_count,
                "joined": self.assembler.joined_fetches,
            }
        return status


def create_app(
    settings: Settings = global_settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create the FastAPI app with its cache, client and services wired up.

    Args:
        settings: Application settings
        transport: Optional httpx transport for the upstream client

    Returns:
        FastAPI app
    """
    cache = CacheManager(max_size=settings.cache_max_size, debug=settings.debug)
    client = UpstreamClient(
        service_id=SwapiSource.SERVICE_ID,
        timeout=settings.request_timeout,
        transport=transport,
    )
    source = SwapiSource(
        client, base_url=settings.swapi_base_url, page_size=settings.page_size
    )
    assembler = CharacterAssembler(
        source,
        cache,
        ttl=settings.character_cache_ttl,
        single_flight=settings.single_flight,
    )
    listing_service = CharacterListingService(
        source, assembler, cache, fanout_limit=settings.fanout_limit
    )

    server = CharacterServer(
        listing_service,
        cache,
        client,
        assembler,
        api_prefix=settings.api_prefix,
        cors_origins=settings.cors_origin_list,
    )
    return server.app
