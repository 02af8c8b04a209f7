from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from feedhub.api.deps import (
    get_content_repository,
    get_current_user,
    get_owned_source,
    get_source_repository,
)
from feedhub.core.exceptions import ContentNotFoundError
from feedhub.models import Content, ContentStatus, User
from feedhub.repositories import ContentStore, SourceStore
from feedhub.schemas import ContentResponse, ContentStatusUpdate, ContentPriorityUpdate

router = APIRouter(prefix="/api", tags=["contents"])


async def get_owned_content(
    content_id: UUID,
    user: User,
    contents: ContentStore,
    sources: SourceStore,
) -> Content:
    content = await contents.find_by_id(content_id)
    if not content:
        raise ContentNotFoundError()

    # Ownership goes through the parent source
    await get_owned_source(content.source_id, user, sources)
    return content


@router.get("/sources/{source_id}/contents", response_model=List[ContentResponse])
async def list_source_contents(
    source_id: UUID,
    status: Optional[ContentStatus] = Query(None, description="Filter by status"),
    limit: int = Query(50, ge=1, le=100, description="Number of items to return"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
    contents: ContentStore = Depends(get_content_repository),
):
    """
    List a source's items, newest first
    """
    await get_owned_source(source_id, user, sources)
    return await contents.find_by_source_id(source_id, status=status, limit=limit, offset=offset)


@router.patch("/contents/{content_id}/status", response_model=ContentResponse)
async def update_content_status(
    content_id: UUID,
    update: ContentStatusUpdate,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
    contents: ContentStore = Depends(get_content_repository),
):
    """
    Mark an item unread, read, archived or deleted
    """
    await get_owned_content(content_id, user, contents, sources)
    return await contents.update_status(content_id, update.status)


@router.patch("/contents/{content_id}/priority", response_model=ContentResponse)
async def update_content_priority(
    content_id: UUID,
    update: ContentPriorityUpdate,
    user: User = Depends(get_current_user),
    sources: SourceStore = Depends(get_source_repository),
    contents: ContentStore = Depends(get_content_repository),
):
    await get_owned_content(content_id, user, contents, sources)
    return await contents.update_priority(content_id, update.priority)
