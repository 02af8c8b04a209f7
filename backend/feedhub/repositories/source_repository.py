import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedhub.core.config import settings
from feedhub.core.exceptions import SourceNotFoundError
from feedhub.models import Source
from feedhub.repositories.base import SourceStore

logger = logging.getLogger(__name__)

# Lower bound of any per-source cadence, used to narrow the SQL query
_MIN_REFRESH_RATE_MINUTES = 5


class SourceRepository(SourceStore):
    """SQLAlchemy-backed source store; every call runs in its own session"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_id(self, source_id: UUID) -> Optional[Source]:
        async with self.session_factory() as db:
            return await db.get(Source, source_id)

    async def create(self, data: Dict[str, Any]) -> Source:
        async with self.session_factory() as db:
            source = Source(**data)
            db.add(source)
            await db.commit()
            await db.refresh(source)
            logger.info(f"Created source '{source.name}' ({source.id}) for user {source.user_id}")
            return source

    async def update(self, source_id: UUID, data: Dict[str, Any]) -> Source:
        async with self.session_factory() as db:
            source = await db.get(Source, source_id)
            if not source:
                raise SourceNotFoundError(source_id)

            for field, value in data.items():
                setattr(source, field, value)

            await db.commit()
            await db.refresh(source)
            return source

    async def delete(self, source_id: UUID) -> bool:
        async with self.session_factory() as db:
            source = await db.get(Source, source_id)
            if not source:
                logger.warning(f"Attempted to delete non-existent source: {source_id}")
                return False

            # Delete the source (cascade will handle contents)
            await db.delete(source)
            await db.commit()
            logger.info(f"Deleted source {source_id}")
            return True

    async def find_by_user_id(self, user_id: UUID) -> List[Source]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(Source)
                .where(Source.user_id == user_id)
                .order_by(Source.created_at.desc())
            )
            return list(result.scalars().all())

    async def find_sources_to_refresh(self, older_than_minutes: Optional[int] = None) -> List[Source]:
        now = datetime.now(timezone.utc)
        window = older_than_minutes if older_than_minutes is not None else _MIN_REFRESH_RATE_MINUTES
        threshold = now - timedelta(minutes=window)

        async with self.session_factory() as db:
            result = await db.execute(
                select(Source)
                .where(
                    Source.is_active.is_(True),
                    or_(Source.last_fetched.is_(None), Source.last_fetched < threshold),
                )
                .order_by(Source.last_fetched.asc().nulls_first())
            )
            sources = list(result.scalars().all())

        if older_than_minutes is not None:
            return sources

        # Without an override, each source's own cadence decides
        return [source for source in sources if _is_due(source, now)]

    async def update_last_fetched(self, source_id: UUID) -> Source:
        return await self.update(source_id, {"last_fetched": datetime.now(timezone.utc)})


def _is_due(source: Source, now: datetime) -> bool:
    if source.last_fetched is None:
        return True

    last_fetched = source.last_fetched
    if last_fetched.tzinfo is None:
        # SQLite hands back naive datetimes
        last_fetched = last_fetched.replace(tzinfo=timezone.utc)

    refresh_rate = source.refresh_rate or settings.DEFAULT_REFRESH_RATE_MINUTES
    return last_fetched < now - timedelta(minutes=refresh_rate)
