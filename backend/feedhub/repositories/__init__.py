from .base import SourceStore, ContentStore, UserStore
from .source_repository import SourceRepository
from .content_repository import ContentRepository
from .user_repository import UserRepository

__all__ = [
    "SourceStore",
    "ContentStore",
    "UserStore",
    "SourceRepository",
    "ContentRepository",
    "UserRepository",
]
