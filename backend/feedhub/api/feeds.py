import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException

from feedhub.api.deps import (
    get_current_user,
    get_feed_service,
    get_owned_source,
    get_source_repository,
)
from feedhub.core.exceptions import (
    FeedFetchError,
    FeedParseError,
    FeedValidationError,
    InvalidRefreshRateError,
    SourceNotFoundError,
    UnsupportedSourceTypeError,
)
from feedhub.models import User
from feedhub.repositories import SourceStore
from feedhub.schemas import (
    AddFeedSourceParams,
    FeedDiscoveryResult,
    FeedRefreshResult,
    FeedUrlRequest,
    FeedValidationResult,
    SourceCreate,
    SourceDeleteResponse,
    SourceResponse,
    SourceUpdate,
)
from feedhub.services.feed_service import RssFeedService

router = APIRouter(prefix="/api", tags=["feeds"])
logger = logging.getLogger(__name__)


@router.post(
    "/feeds/validate",
    response_model=FeedValidationResult,
    summary="Validate Feed URL",
    description="Fetch a URL and check that it is a parsable RSS/Atom feed. Failures come back as `isValid: false` with an error message.",
    tags=["Validation"]
)
async def validate_feed_url(
    request: FeedUrlRequest,
    user: User = Depends(get_current_user),
    feed_service: RssFeedService = Depends(get_feed_service),
):
    return await feed_service.validate_feed_url(request.url)


@router.post(
    "/feeds/discover",
    response_model=FeedDiscoveryResult,
    summary="Discover Feeds",
    description="""
Find the RSS/Atom feeds of a website.

The URL is checked in order:
1. the URL itself, when it is served as a feed
2. `<link rel="alternate">` feed links in the page
3. conventional paths: `/feed`, `/rss`, `/feed.xml`, `/atom.xml`, `/rss.xml`
    """,
    tags=["Validation"]
)
async def discover_feeds(
    request: FeedUrlRequest,
    user: User = Depends(get_current_user),
    feed_service: RssFeedService = Depends(get_feed_service),
):
    return await feed_service.discover_feeds(request.url)


@router.post(
    "/sources",
    response_model=SourceResponse,
    status_code=201,
    summary="Add Feed Source",
    description="""
Register a feed source for the current user.

Website URLs (not ending in `.rss`, `.xml` or `.atom`) go through feed
discovery first and the first feed found is registered. The feed must
validate; otherwise the validation message is returned with status 400.
    """,
    tags=["Sources"]
)
async def add_feed_source(
    source: SourceCreate,
    user: User = Depends(get_current_user),
    feed_service: RssFeedService = Depends(get_feed_service),
):
    try:
        return await feed_service.add_feed_source(AddFeedSourceParams(
            url=source.url,
            user_id=user.id,
            name=source.name,
            refresh_rate=source.refresh_rate,
            settings=source.settings,
        ))
    except FeedValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InvalidRefreshRateError as e:
        raise HTTPException(status_code=422, detail=str(e))


@router.get(
    "/sources",
    response_model=List[SourceResponse],
    summary="List Feed Sources",
    description="All sources of the current user, newest first.",
    tags=["Sources"]
)
async def list_feed_sources(
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
):
    return await sources.find_by_user_id(user.id)


@router.get(
    "/sources/{source_id}",
    response_model=SourceResponse,
    summary="Get Feed Source",
    tags=["Sources"]
)
async def get_feed_source(
    source_id: UUID,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
):
    return await get_owned_source(source_id, user, sources)


@router.patch(
    "/sources/{source_id}",
    response_model=SourceResponse,
    summary="Update Feed Source",
    description="""
Partially update a source: `name`, `isActive`, `refreshRate` (5-1440 minutes)
or `settings`. At least one field must be provided.
    """,
    tags=["Sources"]
)
async def update_feed_source(
    source_id: UUID,
    updates: SourceUpdate,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
    feed_service: RssFeedService = Depends(get_feed_service),
):
    changes = updates.model_dump(exclude_unset=True)
    if not changes:
        raise HTTPException(
            status_code=400,
            detail="At least one field (name, isActive, refreshRate or settings) must be provided"
        )

    await get_owned_source(source_id, user, sources)

    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="Name cannot be empty")
        changes["name"] = name

    try:
        source = await feed_service.update_feed_source(source_id, changes)
    except InvalidRefreshRateError as e:
        raise HTTPException(status_code=422, detail=str(e))

    logger.info(f"Updated source {source_id}: {', '.join(changes)}")
    return source


@router.delete(
    "/sources/{source_id}",
    response_model=SourceDeleteResponse,
    summary="Delete Feed Source",
    description="Delete a source and, by cascade, all of its content.",
    tags=["Sources"]
)
async def delete_feed_source(
    source_id: UUID,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
):
    await get_owned_source(source_id, user, sources)

    deleted = await sources.delete(source_id)
    return SourceDeleteResponse(success=deleted)


@router.post(
    "/sources/{source_id}/refresh",
    response_model=FeedRefreshResult,
    summary="Refresh Feed Source",
    description="Fetch the source's feed now and store new items. Fetch or parse failures return 502.",
    tags=["Sources"]
)
async def refresh_feed_source(
    source_id: UUID,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
    feed_service: RssFeedService = Depends(get_feed_service),
):
    await get_owned_source(source_id, user, sources)

    try:
        return await feed_service.fetch_feed_content(source_id)
    except SourceNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except UnsupportedSourceTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (FeedFetchError, FeedParseError) as e:
        logger.warning(f"Manual refresh of source {source_id} failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
