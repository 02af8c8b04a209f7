import logging
from typing import Optional

import httpx

from feedhub.core.exceptions import FeedParseError
from feedhub.schemas import FeedValidationResult
from feedhub.services.feed_cache import FeedValidationCache
from feedhub.services.feed_parser import FeedParser, normalize_url

logger = logging.getLogger(__name__)

DEFAULT_FEED_TITLE = "RSS Feed"


class FeedValidator:
    """Confirms that a URL serves a parsable RSS/Atom feed"""

    def __init__(self, parser: FeedParser, cache: Optional[FeedValidationCache] = None):
        self.parser = parser
        self.cache = cache

    async def validate_feed_url(self, url: str) -> FeedValidationResult:
        """
        Validate a feed URL by fetching and parsing it.

        Never raises for bad input, network or parse problems; those come back
        as an invalid result with an error message.

        Returns:
            FeedValidationResult with is_valid, feed_title and error
        """
        normalized = normalize_url(url)
        if not normalized:
            return FeedValidationResult(is_valid=False, error="Invalid URL format")
        url = normalized

        if self.cache:
            cached = await self.cache.get(url)
            if cached:
                return cached

        try:
            response = await self.parser.fetch(url)
        except httpx.RequestError as e:
            logger.warning(f"Network error validating feed {url}: {e}")
            return FeedValidationResult(is_valid=False, error=f"Network error: {e}")

        if not response.is_success:
            logger.warning(f"HTTP {response.status_code} validating feed {url}")
            return FeedValidationResult(is_valid=False, error=f"HTTP error: {response.status_code}")

        # The header is only a hint: many feeds are served as text/html or
        # text/plain, so the body is always parsed
        content_type = response.headers.get("content-type", "").lower()
        looks_like_xml = "xml" in content_type or "rss" in content_type or "atom" in content_type

        try:
            parsed = self.parser.parse_string(response.content)
        except FeedParseError as e:
            logger.info(f"Not a feed: {url} ({e})")
            if looks_like_xml:
                return FeedValidationResult(is_valid=False, error="Not a valid RSS/Atom feed format")
            return FeedValidationResult(is_valid=False, error="Not an RSS/Atom feed")

        result = FeedValidationResult(
            is_valid=True,
            feed_title=parsed.title or httpx.URL(url).path.split("/")[-1] or DEFAULT_FEED_TITLE,
        )
        logger.info(f"Validated feed: {result.feed_title} ({url})")

        if self.cache:
            await self.cache.set(url, result)

        return result
