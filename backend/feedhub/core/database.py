from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from .config import settings


def build_engine(database_url: str, echo: bool = False):
    """Create an async engine, with pooling tuned for server databases"""
    engine_kwargs = {
        "echo": echo,
        "future": True,
        "pool_pre_ping": True,  # Verify connections before using them
    }

    # SQLite (tests, local dev) uses its own pool classes without sizing options
    if not database_url.startswith("sqlite"):
        engine_kwargs.update(
            pool_size=20,  # Maximum number of persistent connections
            max_overflow=10,  # Connections allowed beyond pool_size
            pool_timeout=30,  # Seconds to wait before giving up on getting a connection
            pool_recycle=3600,  # Recycle connections after 1 hour to prevent stale connections
        )

    return create_async_engine(database_url, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Create declarative base
Base = declarative_base()

