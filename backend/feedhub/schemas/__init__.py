from .feed import (
    FeedUrlRequest,
    FeedValidationResult,
    DiscoveredFeed,
    FeedDiscoveryResult,
    FeedRefreshResult,
    FailedSource,
    BulkFeedRefreshResult,
    AddFeedSourceParams,
)
from .source import SourceCreate, SourceUpdate, SourceResponse, SourceDeleteResponse
from .content import ContentResponse, ContentStatusUpdate, ContentPriorityUpdate
from .admin import SchedulerStatus, SchedulerStartRequest, SchedulerActionResponse, RefreshCycleResponse

__all__ = [
    "FeedUrlRequest",
    "FeedValidationResult",
    "DiscoveredFeed",
    "FeedDiscoveryResult",
    "FeedRefreshResult",
    "FailedSource",
    "BulkFeedRefreshResult",
    "AddFeedSourceParams",
    "SourceCreate",
    "SourceUpdate",
    "SourceResponse",
    "SourceDeleteResponse",
    "ContentResponse",
    "ContentStatusUpdate",
    "ContentPriorityUpdate",
    "SchedulerStatus",
    "SchedulerStartRequest",
    "SchedulerActionResponse",
    "RefreshCycleResponse",
]
