"""
In-memory stores for service and route tests.

They hand out real ORM instances (never attached to a session), filling in
the column defaults the database would otherwise apply.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from feedhub.core.exceptions import ContentNotFoundError, SourceNotFoundError
from feedhub.models import (
    Content,
    ContentPriority,
    ContentStatus,
    Source,
    SourceType,
    User,
    UserRole,
)
from feedhub.repositories import ContentStore, SourceStore, UserStore


def utc_now():
    return datetime.now(timezone.utc)


class FakeSourceStore(SourceStore):

    def __init__(self):
        self.sources: Dict[UUID, Source] = {}

    def add_source(self, user_id: UUID, url: str = "https://example.com/feed.xml", **fields) -> Source:
        """Insert a source directly, bypassing registration"""
        data = {
            "name": "Example",
            "url": url,
            "user_id": user_id,
            "source_type": SourceType.RSS,
            "is_active": True,
            "refresh_rate": 60,
            "settings": {"fetchFullText": False},
            "last_fetched": None,
        }
        data.update(fields)
        source = Source(id=uuid.uuid4(), created_at=utc_now(), updated_at=utc_now(), **data)
        self.sources[source.id] = source
        return source

    async def find_by_id(self, source_id: UUID) -> Optional[Source]:
        return self.sources.get(source_id)

    async def create(self, data: Dict[str, Any]) -> Source:
        source = Source(id=uuid.uuid4(), created_at=utc_now(), updated_at=utc_now(), **data)
        self.sources[source.id] = source
        return source

    async def update(self, source_id: UUID, data: Dict[str, Any]) -> Source:
        source = self.sources.get(source_id)
        if not source:
            raise SourceNotFoundError(source_id)

        for field, value in data.items():
            setattr(source, field, value)
        source.updated_at = utc_now()
        return source

    async def delete(self, source_id: UUID) -> bool:
        return self.sources.pop(source_id, None) is not None

    async def find_by_user_id(self, user_id: UUID) -> List[Source]:
        owned = [source for source in self.sources.values() if source.user_id == user_id]
        return sorted(owned, key=lambda source: source.created_at, reverse=True)

    async def find_sources_to_refresh(self, older_than_minutes: Optional[int] = None) -> List[Source]:
        now = utc_now()
        due = []
        for source in self.sources.values():
            if not source.is_active:
                continue
            if source.last_fetched is None:
                due.append(source)
                continue

            window = older_than_minutes if older_than_minutes is not None else source.refresh_rate
            if source.last_fetched < now - timedelta(minutes=window):
                due.append(source)

        epoch = datetime.min.replace(tzinfo=timezone.utc)
        return sorted(due, key=lambda source: source.last_fetched or epoch)

    async def update_last_fetched(self, source_id: UUID) -> Source:
        return await self.update(source_id, {"last_fetched": utc_now()})


class FakeContentStore(ContentStore):

    def __init__(self):
        self.contents: Dict[UUID, Content] = {}

    def add_content(self, source_id: UUID, url: str, **fields) -> Content:
        data = {"title": "Stored item", "published_at": utc_now()}
        data.update(fields)
        return self._insert({"source_id": source_id, "url": url, **data})

    def _insert(self, data: Dict[str, Any]) -> Content:
        data.setdefault("status", ContentStatus.UNREAD)
        data.setdefault("priority", ContentPriority.MEDIUM)
        content = Content(id=uuid.uuid4(), created_at=utc_now(), updated_at=utc_now(), **data)
        self.contents[content.id] = content
        return content

    def for_source(self, source_id: UUID) -> List[Content]:
        return [content for content in self.contents.values() if content.source_id == source_id]

    async def find_by_id(self, content_id: UUID) -> Optional[Content]:
        return self.contents.get(content_id)

    async def find_by_source_id(
        self,
        source_id: UUID,
        status: Optional[ContentStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Content]:
        items = [
            content for content in self.for_source(source_id)
            if status is None or content.status == status
        ]
        items.sort(key=lambda content: content.published_at, reverse=True)
        items = items[offset:]
        return items[:limit] if limit is not None else items

    async def create(self, data: Dict[str, Any]) -> Optional[Content]:
        for content in self.for_source(data["source_id"]):
            if content.url == data["url"]:
                return None
        return self._insert(dict(data))

    async def update_status(self, content_id: UUID, status: ContentStatus) -> Content:
        return self._update(content_id, status=status)

    async def update_priority(self, content_id: UUID, priority: ContentPriority) -> Content:
        return self._update(content_id, priority=priority)

    def _update(self, content_id: UUID, **fields) -> Content:
        content = self.contents.get(content_id)
        if not content:
            raise ContentNotFoundError()
        for field, value in fields.items():
            setattr(content, field, value)
        return content


class FakeUserStore(UserStore):

    def __init__(self):
        self.users: Dict[str, User] = {}

    def add_user(self, external_uid: str, role: UserRole = UserRole.USER, **fields) -> User:
        user = User(id=uuid.uuid4(), external_uid=external_uid, role=role, created_at=utc_now(), **fields)
        self.users[external_uid] = user
        return user

    async def find_by_external_uid(self, external_uid: str) -> Optional[User]:
        return self.users.get(external_uid)

    async def upsert(self, external_uid: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        user = self.users.get(external_uid)
        if user is None:
            return self.add_user(external_uid, email=email, name=name)

        if email:
            user.email = email
        if name:
            user.name = name
        return user
