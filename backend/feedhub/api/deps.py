"""
Request dependencies shared by the routers.

Services are built once by the application lifespan and kept on
``app.state``; these helpers hand them to the endpoints.
"""

import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request

from feedhub.core.exceptions import (
    AuthenticationRequiredError,
    SourceNotFoundHTTPError,
    UnauthorizedError,
)
from feedhub.models import Source, User
from feedhub.repositories import SourceStore, ContentStore, UserStore
from feedhub.services.feed_refresh_scheduler import FeedRefreshScheduler
from feedhub.services.feed_service import RssFeedService

logger = logging.getLogger(__name__)


def get_source_repository(request: Request) -> SourceStore:
    return request.app.state.source_repository


def get_content_repository(request: Request) -> ContentStore:
    return request.app.state.content_repository


def get_user_repository(request: Request) -> UserStore:
    return request.app.state.user_repository


def get_feed_service(request: Request) -> RssFeedService:
    return request.app.state.feed_service


def get_feed_refresh_scheduler(request: Request) -> FeedRefreshScheduler:
    return request.app.state.feed_refresh_scheduler


async def get_current_user(
    x_auth_uid: Optional[str] = Header(None, description="Subject of the authenticated identity"),
    x_auth_email: Optional[str] = Header(None),
    x_auth_name: Optional[str] = Header(None),
    users: UserStore = Depends(get_user_repository),
) -> User:
    """
    Resolve the caller to a local user record.

    Authentication itself happens upstream (the gateway verifies the identity
    token and forwards its subject); the first request of a new identity
    creates the local record.
    """
    if not x_auth_uid or not x_auth_uid.strip():
        raise AuthenticationRequiredError()

    return await users.upsert(x_auth_uid.strip(), email=x_auth_email, name=x_auth_name)


async def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        logger.warning(f"User {user.id} attempted an admin operation")
        raise UnauthorizedError("Admin access required")
    return user


async def get_owned_source(source_id: UUID, user: User, sources: SourceStore) -> Source:
    """Load a source and make sure the caller owns it"""
    source = await sources.find_by_id(source_id)

    if not source:
        raise SourceNotFoundHTTPError()

    if source.user_id != user.id:
        logger.warning(
            f"User {user.id} attempted to access source {source_id} "
            f"owned by {source.user_id}"
        )
        raise UnauthorizedError()

    return source
