from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import Field

from feedhub.models import ContentStatus, ContentPriority
from .base import CamelModel


class ContentResponse(CamelModel):
    id: UUID
    source_id: UUID
    title: str
    url: str
    content_text: Optional[str] = None
    content_html: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    status: ContentStatus
    priority: ContentPriority
    metadata: Optional[Dict[str, Any]] = Field(None, validation_alias="item_metadata")
    created_at: datetime


class ContentStatusUpdate(CamelModel):
    status: ContentStatus


class ContentPriorityUpdate(CamelModel):
    priority: ContentPriority
