import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from feedhub.models import User
from feedhub.repositories.base import UserStore

logger = logging.getLogger(__name__)


class UserRepository(UserStore):
    """Local user records mirroring identities from the auth provider"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def find_by_external_uid(self, external_uid: str) -> Optional[User]:
        async with self.session_factory() as db:
            result = await db.execute(
                select(User).where(User.external_uid == external_uid)
            )
            return result.scalar_one_or_none()

    async def upsert(self, external_uid: str, email: Optional[str] = None, name: Optional[str] = None) -> User:
        async with self.session_factory() as db:
            result = await db.execute(
                select(User).where(User.external_uid == external_uid)
            )
            user = result.scalar_one_or_none()

            if user is None:
                user = User(external_uid=external_uid, email=email, name=name)
                db.add(user)
                logger.info(f"Created local user for identity {external_uid}")
            else:
                # Keep profile fields in sync with the identity provider
                if email and user.email != email:
                    user.email = email
                if name and user.name != name:
                    user.name = name

            await db.commit()
            await db.refresh(user)
            return user
