import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from feedhub.core.config import settings
from feedhub.core.exceptions import (
    FeedValidationError,
    InvalidRefreshRateError,
    SourceNotFoundError,
    UnsupportedSourceTypeError,
)
from feedhub.models import Source, SourceType, ContentStatus, ContentPriority
from feedhub.repositories import SourceStore, ContentStore
from feedhub.schemas import (
    AddFeedSourceParams,
    BulkFeedRefreshResult,
    FailedSource,
    FeedDiscoveryResult,
    FeedRefreshResult,
    FeedValidationResult,
)
from feedhub.schemas.source import MIN_REFRESH_RATE, MAX_REFRESH_RATE
from feedhub.services.feed_discovery import FeedDiscovery
from feedhub.services.feed_parser import FeedParser, normalize_url
from feedhub.services.feed_validator import FeedValidator

logger = logging.getLogger(__name__)

# URLs ending like this are registered as-is, without discovery
DIRECT_FEED_URL = re.compile(r"\.(rss|xml|atom)$", re.IGNORECASE)

WORDS_PER_MINUTE = 230
DEFAULT_SOURCE_SETTINGS = {"fetchFullText": False}


def estimate_read_time(text: str) -> int:
    """Estimated reading time in whole minutes, at least 1"""
    word_count = len((text or "").split())
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def check_refresh_rate(refresh_rate: Optional[int]) -> None:
    if refresh_rate is None:
        return
    if not MIN_REFRESH_RATE <= refresh_rate <= MAX_REFRESH_RATE:
        raise InvalidRefreshRateError(
            f"Refresh rate must be between {MIN_REFRESH_RATE} and {MAX_REFRESH_RATE} minutes"
        )


class RssFeedService:
    """Registers RSS sources and synchronizes their items into the content store"""

    def __init__(
        self,
        source_store: SourceStore,
        content_store: ContentStore,
        parser: Optional[FeedParser] = None,
        validator: Optional[FeedValidator] = None,
        discovery: Optional[FeedDiscovery] = None,
    ):
        self.source_store = source_store
        self.content_store = content_store
        self.parser = parser or FeedParser()
        self.validator = validator or FeedValidator(self.parser)
        self.discovery = discovery or FeedDiscovery(self.parser, self.validator)

    async def validate_feed_url(self, url: str) -> FeedValidationResult:
        return await self.validator.validate_feed_url(url)

    async def discover_feeds(self, url: str) -> FeedDiscoveryResult:
        return await self.discovery.discover_feeds(url)

    async def add_feed_source(self, params: AddFeedSourceParams) -> Source:
        """
        Register a new RSS source for a user.

        Website URLs are run through discovery first and the first feed found
        is registered instead. The chosen URL must validate.

        Raises:
            InvalidRefreshRateError: If the refresh rate is out of bounds
            FeedValidationError: With the validation message if the feed is invalid
        """
        check_refresh_rate(params.refresh_rate)

        # Persist the same form the validator fetches
        feed_url = normalize_url(params.url) or params.url
        requested_url = feed_url
        feed_title = ""

        if not DIRECT_FEED_URL.search(feed_url):
            try:
                discovery = await self.discovery.discover_feeds(feed_url)
                if discovery.success and discovery.discovered_feeds:
                    first = discovery.discovered_feeds[0]
                    feed_url = first.url
                    feed_title = first.title or ""
                    logger.info(f"Discovered feed {feed_url} for {requested_url}")
            except Exception as e:
                logger.warning(f"Feed discovery failed for {requested_url}, validating it directly: {e}")

        validation = await self.validator.validate_feed_url(feed_url)
        if not validation.is_valid:
            raise FeedValidationError(validation.error or "Invalid feed")

        source = await self.source_store.create({
            "url": feed_url,
            "name": params.name or feed_title or validation.feed_title or "",
            "source_type": SourceType.RSS,
            "user_id": params.user_id,
            "is_active": True,
            "refresh_rate": params.refresh_rate or settings.DEFAULT_REFRESH_RATE_MINUTES,
            "settings": params.settings if params.settings is not None else dict(DEFAULT_SOURCE_SETTINGS),
            "last_fetched": None,
        })

        logger.info(f"Registered source '{source.name}' ({feed_url}) for user {params.user_id}")
        return source

    async def update_feed_source(self, source_id: UUID, updates: Dict[str, Any]) -> Source:
        """Apply user edits (name, active flag, cadence, settings) to a source"""
        check_refresh_rate(updates.get("refresh_rate"))
        return await self.source_store.update(source_id, updates)

    async def fetch_feed_content(self, source_id: UUID) -> FeedRefreshResult:
        """
        Fetch a source's feed and store the items not seen before.

        Items are de-duplicated by URL within the source; items already stored
        are only counted. The source's last-fetched time is updated even when
        nothing new arrived.

        Raises:
            SourceNotFoundError: If the source does not exist
            UnsupportedSourceTypeError: If the source is not an RSS feed
            FeedFetchError: If the feed cannot be downloaded
            FeedParseError: If the feed cannot be parsed
        """
        source = await self.source_store.find_by_id(source_id)
        if not source:
            raise SourceNotFoundError(source_id)

        if source.source_type != SourceType.RSS:
            raise UnsupportedSourceTypeError(f"Source type {source.source_type.value} cannot be fetched")

        feed = await self.parser.parse_url(source.url)
        fetched_at = datetime.now(timezone.utc)

        existing_items = await self.content_store.find_by_source_id(source_id)
        known_urls = {item.url for item in existing_items}

        new_items_count = 0
        updated_items_count = 0

        for item in feed.items:
            if not item.link:
                continue

            if item.link in known_urls:
                updated_items_count += 1
                continue

            created = await self.content_store.create({
                "source_id": source_id,
                "title": item.title or "Untitled",
                "url": item.link,
                "published_at": item.published or fetched_at,
                "content_text": item.content_text or "",
                "content_html": item.content_html or "",
                "author": item.author,
                "status": ContentStatus.UNREAD,
                "priority": ContentPriority.MEDIUM,
                "item_metadata": {
                    "feedItemId": item.guid,
                    "categories": item.categories,
                    "readTime": estimate_read_time(item.content_text),
                },
            })
            known_urls.add(item.link)

            # Another refresh of this source stored it first
            if created is None:
                updated_items_count += 1
                continue

            new_items_count += 1

        await self.source_store.update_last_fetched(source_id)

        logger.info(
            f"Fetched '{source.name}': {new_items_count} new, "
            f"{updated_items_count} already stored"
        )
        return FeedRefreshResult(
            new_items_count=new_items_count,
            updated_items_count=updated_items_count,
        )

    async def refresh_all_feeds(self, older_than_minutes: Optional[int] = None) -> BulkFeedRefreshResult:
        """
        Refresh every active source that is due.

        Sources are processed one at a time. A source that fails is recorded
        in ``failed_sources`` and the batch moves on; only a failure to select
        the sources aborts the call.
        """
        sources = await self.source_store.find_sources_to_refresh(older_than_minutes)
        logger.info(f"Found {len(sources)} source(s) due for refresh")

        result = BulkFeedRefreshResult()

        for source in sources:
            result.total_processed += 1
            try:
                fetch_result = await self.fetch_feed_content(source.id)
            except Exception as e:
                logger.error(f"Error refreshing source {source.id} ({source.url}): {e}")
                result.failed_sources.append(FailedSource(id=source.id, error=str(e)))
                continue

            result.successful_sources += 1
            result.new_items_count += fetch_result.new_items_count
            result.updated_items_count += fetch_result.updated_items_count

        return result
