from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from feedhub.api import admin, contents, feeds
from feedhub.core.config import settings
from feedhub.core.database import AsyncSessionLocal
from feedhub.repositories import ContentRepository, SourceRepository, UserRepository
from feedhub.services.feed_cache import FeedValidationCache
from feedhub.services.feed_parser import FeedParser
from feedhub.services.feed_refresh_scheduler import FeedRefreshScheduler
from feedhub.services.feed_service import RssFeedService
from feedhub.services.feed_validator import FeedValidator

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_services(app: FastAPI, session_factory=AsyncSessionLocal) -> None:
    """Wire repositories, feed services and the refresh scheduler onto app.state"""
    app.state.source_repository = SourceRepository(session_factory)
    app.state.content_repository = ContentRepository(session_factory)
    app.state.user_repository = UserRepository(session_factory)

    parser = FeedParser()
    validator = FeedValidator(
        parser,
        cache=FeedValidationCache(
            ttl=settings.FEED_CACHE_TTL_SECONDS,
            max_size=settings.FEED_CACHE_MAX_SIZE,
        ),
    )
    app.state.feed_service = RssFeedService(
        app.state.source_repository,
        app.state.content_repository,
        parser=parser,
        validator=validator,
    )
    app.state.feed_refresh_scheduler = FeedRefreshScheduler(app.state.feed_service)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle manager for the FastAPI app"""
    # Startup
    logger.info("Starting FeedHub API")
    build_services(app)

    if settings.FEED_REFRESH_AUTOSTART:
        app.state.feed_refresh_scheduler.start(settings.FEED_REFRESH_INTERVAL_MINUTES)

    yield

    # Shutdown
    logger.info("Shutting down FeedHub API")
    app.state.feed_refresh_scheduler.shutdown()


# Create FastAPI app
app = FastAPI(
    title="FeedHub API",
    description="""
## Personal Feed Aggregator Backend API

Register RSS/Atom sources, let the backend poll them, and read the items it
collects.

### Features

* **Feed Discovery**: Find the feeds of any website from its URL
* **Feed Validation**: Check that a URL serves a parsable RSS/Atom feed
* **Source Management**: Add, list, update and delete feed sources
* **Synchronization**: New items are stored once per source, keyed by URL
* **Background Refresh**: Sources are refreshed on their own cadence (5-1440 minutes)

### Authentication

Requests carry the caller's identity in the `X-Auth-Uid` header, set by the
authenticating gateway. Admin endpoints require the `ADMIN` role.
    """,
    version="1.0.0",
    lifespan=lifespan,
    license_info={
        "name": "MIT License",
        "url": "https://opensource.org/licenses/MIT",
    },
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Sources",
            "description": "Register, list, update, delete and manually refresh feed sources."
        },
        {
            "name": "Validation",
            "description": "Validate feed URLs and discover feeds from website URLs."
        },
        {
            "name": "Admin",
            "description": "Control the background feed refresh scheduler. Admin role required."
        }
    ]
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(feeds.router)
app.include_router(contents.router)
app.include_router(admin.router)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "FeedHub API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}
