"""
SWAPI data source for Star Wars people and planets.

API Documentation: https://www.swapi.tech/documentation
No API key required.
"""

from typing import Any

from loguru import logger

from swapi_proxy.services.client import UpstreamClient
from swapi_proxy.services.errors import UpstreamError


class SwapiSource:
    """
    swapi.tech API data source.

    Returns raw payload fragments; assembling them into characters is the
    job of the character services.
    """

    BASE_URL = "https://www.swapi.tech/api"
    SERVICE_ID = "swapi"
    PAGE_SIZE = 10

    def __init__(
        self,
        client: UpstreamClient,
        base_url: str = BASE_URL,
        page_size: int = PAGE_SIZE,
    ):
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.page_size = page_size

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    async def fetch_person(self, uid: str) -> dict[str, Any]:
        """Fetch the properties of a single person."""
        url = f"{self.base_url}/people/{uid}"
        payload = await self.client.get_json(url)
        return self._properties(payload, url)

    async def fetch_planet(self, url: str) -> dict[str, Any]:
        """Fetch the properties of a planet by its resource URL."""
        payload = await self.client.get_json(url)
        return self._properties(payload, url)

    async def search_people(self, name: str) -> Any:
        """
        Search people by (partial) name.

        Returns:
            The raw ``result`` field, normally a list of ``{uid, ...}``
            matches. Callers decide what to do with any other shape.
        """
        payload = await self.client.get_json(
            f"{self.base_url}/people/",
            params={"name": name},
        )
        if not isinstance(payload, dict):
            logger.warning(f"Unexpected search payload for '{name}': {type(payload)}")
            return None
        return payload.get("result")

    async def fetch_people_page(self, page: int) -> dict[str, Any]:
        """
        Fetch one page of people.

        Returns:
            The raw payload, normally ``{"results": [...], "total_pages": n}``.
        """
        payload = await self.client.get_json(
            f"{self.base_url}/people",
            params={"page": page, "limit": self.page_size},
        )
        if not isinstance(payload, dict):
            logger.warning(f"Unexpected page payload for page {page}: {type(payload)}")
            return {}
        return payload

    def _properties(self, payload: Any, url: str) -> dict[str, Any]:
        """Extract ``result.properties`` or fail with UpstreamError."""
        try:
            properties = payload["result"]["properties"]
        except (KeyError, TypeError) as e:
            raise UpstreamError(
                f"Unexpected payload shape from {url}", service_id=self.SERVICE_ID
            ) from e

        if not isinstance(properties, dict):
            raise UpstreamError(
                f"Unexpected payload shape from {url}", service_id=self.SERVICE_ID
            )
        return properties
