from .user import User, UserRole
from .source import Source, SourceType
from .content import Content, ContentStatus, ContentPriority

__all__ = [
    "User",
    "UserRole",
    "Source",
    "SourceType",
    "Content",
    "ContentStatus",
    "ContentPriority",
]
