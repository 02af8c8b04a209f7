import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

import feedparser
import httpx
from bs4 import BeautifulSoup

from feedhub.core.config import settings
from feedhub.core.exceptions import FeedFetchError, FeedParseError

logger = logging.getLogger(__name__)

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)


def normalize_url(url: str) -> Optional[str]:
    """
    Prepend https:// to scheme-less input and check the result is a usable URL.

    Returns:
        The normalized URL, or None if it is malformed
    """
    url = (url or "").strip()
    if not url:
        return None

    if not _SCHEME_PATTERN.match(url):
        url = "https://" + url

    if any(char.isspace() for char in url):
        return None

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, ValueError):
        return None

    if not parsed.host:
        return None

    return url


@dataclass
class ParsedFeedItem:
    link: Optional[str]
    title: Optional[str]
    published: Optional[datetime]
    content_text: str
    content_html: str
    author: Optional[str]
    categories: List[str] = field(default_factory=list)
    guid: Optional[str] = None


@dataclass
class ParsedFeed:
    title: Optional[str]
    link: Optional[str]
    description: Optional[str]
    items: List[ParsedFeedItem] = field(default_factory=list)


class FeedParser:
    """Fetches documents over HTTP and parses RSS/Atom feeds with feedparser"""

    def __init__(
        self,
        timeout: Optional[float] = None,
        user_agent: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout if timeout is not None else settings.FEED_FETCH_TIMEOUT_SECONDS
        self.user_agent = user_agent or settings.FEED_USER_AGENT
        # Tests plug an httpx.MockTransport in here
        self.transport = transport

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def fetch(self, url: str) -> httpx.Response:
        """
        GET a URL and return the response without checking its status.

        Raises:
            httpx.RequestError: On network failures
        """
        async with self.client() as client:
            return await client.get(url)

    def parse_string(self, content: Union[str, bytes]) -> ParsedFeed:
        """
        Parse a feed document.

        Raises:
            FeedParseError: If feedparser does not recognize an RSS/Atom feed
        """
        if isinstance(content, str):
            content = content.encode("utf-8")

        feed = feedparser.parse(content)

        # feedparser is lenient: no entries plus no detected format (or a
        # fatal syntax error) means this is not a feed at all
        if not feed.entries and (feed.bozo or not feed.get("version")):
            bozo_msg = str(feed.get("bozo_exception") or "Unrecognized feed format")
            raise FeedParseError(f"Failed to parse feed: {bozo_msg}")

        items = [self._parse_entry(entry) for entry in feed.entries]

        return ParsedFeed(
            title=feed.feed.get("title") or None,
            link=feed.feed.get("link") or None,
            description=feed.feed.get("description") or None,
            items=items,
        )

    async def parse_url(self, url: str) -> ParsedFeed:
        """
        Fetch and parse the feed at ``url``.

        Raises:
            FeedFetchError: On network failures, unusable URLs and non-2xx responses
            FeedParseError: If the body is not a feed
        """
        try:
            response = await self.fetch(url)
        except (httpx.RequestError, httpx.InvalidURL, ValueError) as e:
            # A stored URL the client cannot even request is a fetch failure too
            raise FeedFetchError(f"Failed to fetch feed from {url}: {e}") from e

        if not response.is_success:
            raise FeedFetchError(f"Failed to fetch feed from {url}: HTTP error: {response.status_code}")

        parsed = self.parse_string(response.content)
        logger.info(f"Parsed feed {url[:60]}: {parsed.title} ({len(parsed.items)} entries)")
        return parsed

    @staticmethod
    def _parse_entry(entry: Any) -> ParsedFeedItem:
        """Convert a feedparser entry into a ParsedFeedItem"""
        summary = entry.get("summary", "") or entry.get("description", "") or ""

        # content:encoded and Atom <content> both land in entry.content
        content_html = ""
        if entry.get("content"):
            content_html = entry.content[0].get("value", "") or ""
        if not content_html:
            content_html = summary

        content_text = html_to_text(summary or content_html)

        published = None
        if entry.get("published_parsed"):
            published = datetime(*entry.published_parsed[:6], tzinfo=timezone.utc)
        elif entry.get("updated_parsed"):
            published = datetime(*entry.updated_parsed[:6], tzinfo=timezone.utc)

        categories = [tag.get("term") for tag in entry.get("tags", []) if tag.get("term")]

        return ParsedFeedItem(
            link=entry.get("link") or None,
            title=entry.get("title") or None,
            published=published,
            content_text=content_text,
            content_html=content_html,
            author=entry.get("author") or None,
            categories=categories,
            guid=entry.get("id") or None,
        )


def html_to_text(markup: str) -> str:
    """Strip markup from a feed snippet"""
    if not markup:
        return ""
    return BeautifulSoup(markup, "html.parser").get_text(" ", strip=True)
