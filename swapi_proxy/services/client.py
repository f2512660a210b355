"""
UpstreamClient - Async JSON-over-HTTP client for third-party APIs.

Wraps a lazily created ``httpx.AsyncClient`` and maps every transport,
status and decode failure onto ``UpstreamError``.
"""

from typing import Any

import httpx
from loguru import logger

from swapi_proxy.services.errors import RequestTimeoutError, UpstreamError


class UpstreamClient:
    """
    Thin async HTTP client used by data sources.

    Usage:
        client = UpstreamClient(service_id="swapi")
        payload = await client.get_json(
            "https://www.swapi.tech/api/people",
            params={"page": 1, "limit": 10},
        )
        await client.close()
    """

    def __init__(
        self,
        service_id: str = "upstream",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.service_id = service_id
        self._timeout = timeout
        self._headers = headers or {}
        self._transport = transport

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                headers=self._headers,
                follow_redirects=True,
                transport=self._transport,
            )
        return self._http_client

    async def get_json(
        self,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """
        GET ``url`` and decode the JSON body.

        Args:
            url: Full URL to request
            params: Query parameters

        Returns:
            Decoded JSON payload

        Raises:
            RequestTimeoutError: If the request times out
            UpstreamError: For transport, HTTP status or decode errors
        """
        client = await self._get_http_client()
        logger.debug(f"GET {url} params={params}")

        try:
            response = await client.get(url, params=params)
            response.raise_for_status()
            return response.json()

        except httpx.TimeoutException as e:
            raise RequestTimeoutError(self.service_id, self._timeout) from e

        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"HTTP {e.response.status_code}: {e.response.text[:200]}",
                service_id=self.service_id,
            ) from e

        except httpx.RequestError as e:
            raise UpstreamError(str(e), service_id=self.service_id) from e

        except ValueError as e:
            raise UpstreamError(
                f"Invalid JSON from {url}: {e}", service_id=self.service_id
            ) from e

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug(f"UpstreamClient '{self.service_id}' closed")
