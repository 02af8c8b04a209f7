"""
Store contracts consumed by the feed ingestion services.

The services only depend on these abstract classes, so they can run against
the SQLAlchemy repositories in production and in-memory fakes in tests.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from feedhub.models import Source, Content, ContentStatus, ContentPriority, User


class SourceStore(ABC):

    @abstractmethod
    async def find_by_id(self, source_id: UUID) -> Optional[Source]:
        ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Source:
        ...

    @abstractmethod
    async def update(self, source_id: UUID, data: Dict[str, Any]) -> Source:
        ...

    @abstractmethod
    async def delete(self, source_id: UUID) -> bool:
        ...

    @abstractmethod
    async def find_by_user_id(self, user_id: UUID) -> List[Source]:
        ...

    @abstractmethod
    async def find_sources_to_refresh(self, older_than_minutes: Optional[int] = None) -> List[Source]:
        """
        Active sources that were never fetched or whose last fetch is older
        than the threshold.

        With ``older_than_minutes`` the threshold applies to every source;
        without it each source's own ``refresh_rate`` decides.
        """

    @abstractmethod
    async def update_last_fetched(self, source_id: UUID) -> Source:
        ...


class ContentStore(ABC):

    @abstractmethod
    async def find_by_id(self, content_id: UUID) -> Optional[Content]:
        ...

    @abstractmethod
    async def find_by_source_id(
        self,
        source_id: UUID,
        status: Optional[ContentStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[Content]:
        ...

    @abstractmethod
    async def create(self, data: Dict[str, Any]) -> Optional[Content]:
        """
        Store a new item.

        Returns None when the source already has an item with this URL.
        """

    @abstractmethod
    async def update_status(self, content_id: UUID, status: ContentStatus) -> Content:
        ...

    @abstractmethod
    async def update_priority(self, content_id: UUID, priority: ContentPriority) -> Content:
        ...


class UserStore(ABC):

    @abstractmethod
    async def find_by_external_uid(self, external_uid: str) -> Optional[User]:
        ...

    @abstractmethod
    async def upsert(self, external_uid: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        ...
