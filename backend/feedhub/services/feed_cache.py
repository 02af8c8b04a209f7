import asyncio
import logging
from typing import Optional
from urllib.parse import urlparse, parse_qs, urlencode, urlunparse

from cachetools import TTLCache

from feedhub.schemas import FeedValidationResult

logger = logging.getLogger(__name__)


class FeedValidationCache:
    """
    In-memory cache of successful feed validations.

    Registration discovers a feed and then validates it again; caching the
    first result avoids fetching the same document twice within a few minutes.

    Features:
    - TTL-based expiration (default 180 seconds)
    - LRU eviction when cache is full (max 999 feeds)
    - Safe for concurrent coroutines
    - Automatic URL normalization for cache keys
    """

    def __init__(self, ttl: int = 180, max_size: int = 999):
        self._cache: TTLCache = TTLCache(maxsize=max_size, ttl=ttl)
        self._lock = asyncio.Lock()
        self._ttl = ttl
        self._max_size = max_size
        logger.info(f"FeedValidationCache initialized: TTL={ttl}s, max_size={max_size}")

    @staticmethod
    def _normalize_url(url: str) -> str:
        """
        Normalize URL for consistent cache key generation.

        - Lowercases scheme and host (paths are case-sensitive)
        - Sorts query parameters alphabetically
        - Removes fragment identifiers
        """
        if not url:
            return url

        parsed = urlparse(url)

        query_params = parse_qs(parsed.query, keep_blank_values=True)
        normalized_query = urlencode(sorted(query_params.items()), doseq=True)

        return urlunparse((
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            normalized_query,
            ''  # Remove fragment
        ))

    async def get(self, url: str) -> Optional[FeedValidationResult]:
        cache_key = self._normalize_url(url)

        async with self._lock:
            cached = self._cache.get(cache_key)

        if cached:
            logger.debug(f"Validation cache HIT for {cache_key[:60]}")
        return cached

    async def set(self, url: str, result: FeedValidationResult) -> None:
        """Store a validation result; only valid feeds are worth remembering"""
        if not result.is_valid:
            return

        cache_key = self._normalize_url(url)
        async with self._lock:
            self._cache[cache_key] = result
        logger.debug(f"Validation cache SET for {cache_key[:60]} (TTL={self._ttl}s)")
