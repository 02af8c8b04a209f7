from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import Field

from feedhub.models import SourceType
from .base import CamelModel

MIN_REFRESH_RATE = 5
MAX_REFRESH_RATE = 1440  # 24 hours


class SourceCreate(CamelModel):
    url: str = Field(..., min_length=1)
    name: Optional[str] = None
    refresh_rate: Optional[int] = Field(None, ge=MIN_REFRESH_RATE, le=MAX_REFRESH_RATE)
    settings: Optional[Dict[str, Any]] = None


class SourceUpdate(CamelModel):
    """
    Schema for updating a source.

    All fields are optional - provide only the fields you want to update.
    """
    name: Optional[str] = None
    is_active: Optional[bool] = None
    refresh_rate: Optional[int] = Field(None, ge=MIN_REFRESH_RATE, le=MAX_REFRESH_RATE)
    settings: Optional[Dict[str, Any]] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"name": "Hacker News"},
                {"isActive": False},
                {"refreshRate": 30, "settings": {"fetchFullText": True}},
            ]
        }
    }


class SourceResponse(CamelModel):
    id: UUID
    user_id: UUID
    name: str
    url: str
    source_type: SourceType
    is_active: bool
    refresh_rate: int
    last_fetched: Optional[datetime] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: datetime
    updated_at: datetime


class SourceDeleteResponse(CamelModel):
    success: bool
