import logging
from typing import Any, Dict, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedhub.core.exceptions import ContentNotFoundError
from feedhub.models import Content, ContentStatus, ContentPriority
from feedhub.repositories.base import ContentStore

logger = logging.getLogger(__name__)


class ContentRepository(ContentStore):
    """SQLAlchemy-backed content store"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_id(self, content_id: UUID) -> Optional[Content]:
        async with self.session_factory() as db:
            return await db.get(Content, content_id)

    async def find_by_source_id(
        self,
        source_id: UUID,
        status: Optional[ContentStatus] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Sequence[Content]:
        query = select(Content).where(Content.source_id == source_id)

        if status is not None:
            query = query.where(Content.status == status)

        # Newest first, same as the reading list
        query = query.order_by(Content.published_at.desc().nulls_last(), Content.created_at.desc())

        if limit is not None:
            query = query.limit(limit)
        if offset:
            query = query.offset(offset)

        async with self.session_factory() as db:
            result = await db.execute(query)
            return result.scalars().all()

    async def create(self, data: Dict[str, Any]) -> Optional[Content]:
        async with self.session_factory() as db:
            content = Content(**data)
            db.add(content)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                # Only a concurrent insert of the same item is tolerated
                if not await self._exists(db, data["source_id"], data["url"]):
                    raise
                logger.info(f"Item {data['url']} of source {data['source_id']} was already stored")
                return None

            await db.refresh(content)
            return content

    @staticmethod
    async def _exists(db: AsyncSession, source_id: UUID, url: str) -> bool:
        result = await db.execute(
            select(Content.id).where(Content.source_id == source_id, Content.url == url)
        )
        return result.first() is not None

    async def update_status(self, content_id: UUID, status: ContentStatus) -> Content:
        return await self._update(content_id, status=status)

    async def update_priority(self, content_id: UUID, priority: ContentPriority) -> Content:
        return await self._update(content_id, priority=priority)

    async def _update(self, content_id: UUID, **fields) -> Content:
        async with self.session_factory() as db:
            content = await db.get(Content, content_id)
            if not content:
                raise ContentNotFoundError(f"Content {content_id} not found")

            for field, value in fields.items():
                setattr(content, field, value)

            await db.commit()
            await db.refresh(content)
            return content
