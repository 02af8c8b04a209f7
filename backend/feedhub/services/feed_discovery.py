import html
import logging
import re
from typing import List, Optional, Tuple
from urllib.parse import urljoin, urlparse

import httpx

from feedhub.schemas import DiscoveredFeed, FeedDiscoveryResult
from feedhub.services.feed_parser import FeedParser, normalize_url
from feedhub.services.feed_validator import FeedValidator

logger = logging.getLogger(__name__)

# Content types that mark the response itself as a feed
FEED_CONTENT_TYPES = (
    "application/rss+xml",
    "application/atom+xml",
    "application/xml",
    "text/xml",
)

# Conventional feed locations probed when a page advertises none
COMMON_FEED_PATHS = ["/feed", "/rss", "/feed.xml", "/atom.xml", "/rss.xml"]

# <link rel="alternate" type="application/rss+xml"> in both attribute orders;
# only alternate links with the RSS or Atom MIME type qualify
_REL_BEFORE_TYPE = re.compile(
    r"<link[^>]*\brel=['\"]alternate['\"][^>]*\btype=['\"]application/(?:rss|atom)\+xml['\"][^>]*>",
    re.IGNORECASE,
)
_TYPE_BEFORE_REL = re.compile(
    r"<link[^>]*\btype=['\"]application/(?:rss|atom)\+xml['\"][^>]*\brel=['\"]alternate['\"][^>]*>",
    re.IGNORECASE,
)
_HREF = re.compile(r"\bhref=['\"]([^'\"]+)['\"]", re.IGNORECASE)
_TITLE = re.compile(r"\btitle=['\"]([^'\"]+)['\"]", re.IGNORECASE)

NO_FEEDS_FOUND = "No valid RSS/Atom feeds found on the website"


def extract_feed_links(page: str, base_url: str) -> List[Tuple[str, Optional[str]]]:
    """
    Find feed links advertised in an HTML page.

    Args:
        page: HTML text
        base_url: URL the page was fetched from, for resolving relative hrefs

    Returns:
        (absolute feed URL, link title or None) pairs, de-duplicated by URL,
        rel-before-type matches first
    """
    links: List[Tuple[str, Optional[str]]] = []
    seen = set()

    for pattern in (_REL_BEFORE_TYPE, _TYPE_BEFORE_REL):
        for match in pattern.finditer(page):
            tag = match.group(0)

            href_match = _HREF.search(tag)
            if not href_match:
                continue

            url = urljoin(base_url, html.unescape(href_match.group(1).strip()))
            if url in seen:
                continue
            seen.add(url)

            title_match = _TITLE.search(tag)
            title = html.unescape(title_match.group(1)) if title_match else None
            links.append((url, title))

    return links


class FeedDiscovery:
    """Locates RSS/Atom feeds for an arbitrary website URL"""

    def __init__(self, parser: FeedParser, validator: FeedValidator):
        self.parser = parser
        self.validator = validator

    async def discover_feeds(self, url: str) -> FeedDiscoveryResult:
        """
        Discover feeds for a URL, stopping at the first stage that finds any:

        1. the URL itself, when it is served with a feed content type
        2. <link rel="alternate"> feed links in the HTML page
        3. conventional paths (/feed, /rss, ...) on the site's origin

        Every candidate is validated; a failing candidate never aborts the
        others.
        """
        normalized = normalize_url(url)
        if not normalized:
            return FeedDiscoveryResult(success=False, error="Invalid URL format")
        url = normalized

        try:
            response = await self.parser.fetch(url)
        except httpx.RequestError as e:
            logger.warning(f"Failed to fetch {url} for discovery: {e}")
            return FeedDiscoveryResult(success=False, error=f"Failed to discover feeds: {e}")

        if not response.is_success:
            return FeedDiscoveryResult(success=False, error=f"HTTP error: {response.status_code}")

        # Stage 1: the URL is already a feed
        content_type = response.headers.get("content-type", "").lower()
        if any(feed_type in content_type for feed_type in FEED_CONTENT_TYPES):
            validation = await self.validator.validate_feed_url(url)
            if validation.is_valid:
                logger.info(f"{url} is itself a feed")
                return FeedDiscoveryResult(
                    success=True,
                    discovered_feeds=[DiscoveredFeed(url=url, title=validation.feed_title)],
                )

        # Stage 2: feed links advertised by the page
        feed_links = extract_feed_links(response.text, url)
        if feed_links:
            logger.info(f"Found {len(feed_links)} feed link(s) on {url}")
            discovered = []
            for feed_url, link_title in feed_links:
                feed = await self._validate_candidate(feed_url, link_title)
                if feed:
                    discovered.append(feed)

            if discovered:
                return FeedDiscoveryResult(success=True, discovered_feeds=discovered)

        # Stage 3: conventional feed paths on the origin
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        discovered = []
        for path in COMMON_FEED_PATHS:
            feed = await self._validate_candidate(f"{origin}{path}")
            if feed:
                discovered.append(feed)

        if discovered:
            logger.info(f"Found {len(discovered)} feed(s) at common paths on {origin}")
            return FeedDiscoveryResult(success=True, discovered_feeds=discovered)

        return FeedDiscoveryResult(success=False, error=NO_FEEDS_FOUND)

    async def _validate_candidate(self, feed_url: str, link_title: Optional[str] = None) -> Optional[DiscoveredFeed]:
        try:
            validation = await self.validator.validate_feed_url(feed_url)
        except Exception as e:
            logger.error(f"Error validating feed candidate {feed_url}: {e}")
            return None

        if not validation.is_valid:
            return None

        return DiscoveredFeed(url=feed_url, title=link_title or validation.feed_title)
