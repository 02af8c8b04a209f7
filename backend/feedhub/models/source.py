import enum
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Boolean, Enum, JSON, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from feedhub.core.database import Base
from feedhub.models.user import get_utc_now


class SourceType(str, enum.Enum):
    RSS = "RSS"
    API = "API"
    EMAIL = "EMAIL"
    WEBSITE = "WEBSITE"


class Source(Base):
    __tablename__ = "sources"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, default="")
    url = Column(String, nullable=False)  # Not unique: several users may follow the same feed
    source_type = Column(Enum(SourceType, native_enum=False, length=16), default=SourceType.RSS, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    refresh_rate = Column(Integer, default=60, nullable=False)  # Minutes, 5..1440
    last_fetched = Column(DateTime(timezone=True), nullable=True)
    settings = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)

    # Relationships
    user = relationship("User", back_populates="sources")
    contents = relationship("Content", back_populates="source", cascade="all, delete-orphan", passive_deletes=True)
