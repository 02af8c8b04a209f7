from pydantic import Field

from .base import CamelModel
from .feed import BulkFeedRefreshResult


class SchedulerStatus(CamelModel):
    is_running: bool


class SchedulerStartRequest(CamelModel):
    check_interval_minutes: int = Field(5, ge=1, le=60)


class SchedulerActionResponse(CamelModel):
    success: bool
    message: str


class RefreshCycleResponse(CamelModel):
    success: bool
    result: BulkFeedRefreshResult
