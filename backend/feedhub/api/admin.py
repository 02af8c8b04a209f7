import logging

from fastapi import APIRouter, Depends

from feedhub.api.deps import get_feed_refresh_scheduler, require_admin
from feedhub.models import User
from feedhub.schemas import (
    RefreshCycleResponse,
    SchedulerActionResponse,
    SchedulerStartRequest,
    SchedulerStatus,
)
from feedhub.services.feed_refresh_scheduler import FeedRefreshScheduler

router = APIRouter(prefix="/api/admin/feed-refresh", tags=["Admin"])
logger = logging.getLogger(__name__)


@router.get("/status", response_model=SchedulerStatus)
async def get_feed_refresh_status(
    admin: User = Depends(require_admin),
    scheduler: FeedRefreshScheduler = Depends(get_feed_refresh_scheduler),
):
    """
    Current state of the background feed refresh scheduler
    """
    return scheduler.get_status()


@router.post("/start", response_model=SchedulerActionResponse)
async def start_feed_refresh(
    request: SchedulerStartRequest = SchedulerStartRequest(),
    admin: User = Depends(require_admin),
    scheduler: FeedRefreshScheduler = Depends(get_feed_refresh_scheduler),
):
    """
    Start the scheduler; it refreshes once right away, then every
    `checkIntervalMinutes` minutes (1-60)
    """
    scheduler.start(request.check_interval_minutes)
    logger.info(f"Admin {admin.id} started the feed refresh scheduler")
    return SchedulerActionResponse(success=True, message="Feed refresh service started")


@router.post("/stop", response_model=SchedulerActionResponse)
async def stop_feed_refresh(
    admin: User = Depends(require_admin),
    scheduler: FeedRefreshScheduler = Depends(get_feed_refresh_scheduler),
):
    scheduler.stop()
    logger.info(f"Admin {admin.id} stopped the feed refresh scheduler")
    return SchedulerActionResponse(success=True, message="Feed refresh service stopped")


@router.post("/run", response_model=RefreshCycleResponse)
async def run_feed_refresh_cycle(
    admin: User = Depends(require_admin),
    scheduler: FeedRefreshScheduler = Depends(get_feed_refresh_scheduler),
):
    """
    Run one refresh cycle now and return its outcome
    """
    result = await scheduler.run_refresh_cycle()
    return RefreshCycleResponse(success=True, result=result)
