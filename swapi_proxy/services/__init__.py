"""
Service layer infrastructure for talking to upstream APIs.

Provides:
- CacheManager: In-memory cache with per-key TTL
- UpstreamClient: Async JSON HTTP client with error mapping
"""

from swapi_proxy.services.errors import (
    ServiceError,
    UpstreamError,
    RequestTimeoutError,
    ListingError,
)
from swapi_proxy.services.cache import (
    NO_EXPIRY,
    CacheEntry,
    CacheManager,
    CacheStats,
    CacheStore,
)
from swapi_proxy.services.client import UpstreamClient

__all__ = [
    # Errors
    "ServiceError",
    "UpstreamError",
    "RequestTimeoutError",
    "ListingError",
    # Cache
    "NO_EXPIRY",
    "CacheEntry",
    "CacheManager",
    "CacheStats",
    "CacheStore",
    # Client
    "UpstreamClient",
]
