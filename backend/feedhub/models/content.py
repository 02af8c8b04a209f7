import enum
import uuid

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Enum, JSON, Uuid, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import relationship

from feedhub.core.database import Base
from feedhub.models.user import get_utc_now


class ContentStatus(str, enum.Enum):
    UNREAD = "UNREAD"
    READ = "READ"
    ARCHIVED = "ARCHIVED"
    DELETED = "DELETED"


class ContentPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Content(Base):
    __tablename__ = "contents"
    __table_args__ = (
        # An item URL is ingested at most once per source
        UniqueConstraint("source_id", "url", name="uq_contents_source_url"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    source_id = Column(Uuid(as_uuid=True), ForeignKey("sources.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String, nullable=False)
    url = Column(String, nullable=False)
    content_text = Column(Text, nullable=True)
    content_html = Column(Text, nullable=True)
    author = Column(String, nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    status = Column(Enum(ContentStatus, native_enum=False, length=16), default=ContentStatus.UNREAD, nullable=False, index=True)
    priority = Column(Enum(ContentPriority, native_enum=False, length=16), default=ContentPriority.MEDIUM, nullable=False)
    # "metadata" is reserved on declarative classes, so the attribute is renamed
    item_metadata = Column("metadata", JSON().with_variant(JSONB(), "postgresql"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=get_utc_now, onupdate=get_utc_now, nullable=False)

    # Relationships
    source = relationship("Source", back_populates="contents")
