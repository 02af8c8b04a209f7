from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import Field

from .base import CamelModel


class FeedUrlRequest(CamelModel):
    url: str = Field(..., min_length=1, description="Feed or website URL")


class FeedValidationResult(CamelModel):
    is_valid: bool
    feed_title: Optional[str] = None
    error: Optional[str] = None


class DiscoveredFeed(CamelModel):
    url: str
    title: Optional[str] = None


class FeedDiscoveryResult(CamelModel):
    success: bool
    discovered_feeds: Optional[List[DiscoveredFeed]] = None
    error: Optional[str] = None


class FeedRefreshResult(CamelModel):
    new_items_count: int = 0
    updated_items_count: int = 0


class FailedSource(CamelModel):
    id: UUID
    error: str


class BulkFeedRefreshResult(CamelModel):
    total_processed: int = 0
    successful_sources: int = 0
    failed_sources: List[FailedSource] = Field(default_factory=list)
    new_items_count: int = 0
    updated_items_count: int = 0


class AddFeedSourceParams(CamelModel):
    url: str
    user_id: UUID
    name: Optional[str] = None
    refresh_rate: Optional[int] = None
    settings: Optional[Dict[str, Any]] = None
