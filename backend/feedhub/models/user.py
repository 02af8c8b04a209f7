import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship

from feedhub.core.database import Base


def get_utc_now():
    """Return current UTC time with timezone info"""
    return datetime.now(timezone.utc)


class UserRole(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    external_uid = Column(String, unique=True, nullable=False, index=True)  # Subject from the identity provider
    email = Column(String, nullable=True, index=True)
    name = Column(String, nullable=True)
    role = Column(Enum(UserRole, native_enum=False, length=16), default=UserRole.USER, nullable=False)
    created_at = Column(DateTime(timezone=True), default=get_utc_now, nullable=False)

    # Relationships
    sources = relationship("Source", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
