"""
Pytest fixtures for backend tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["FEED_REFRESH_AUTOSTART"] = "false"

import httpx
import pytest
from fastapi.testclient import TestClient

from feedhub.main import app
from feedhub.models import UserRole
from feedhub.services.feed_discovery import FeedDiscovery
from feedhub.services.feed_parser import FeedParser
from feedhub.services.feed_refresh_scheduler import FeedRefreshScheduler
from feedhub.services.feed_service import RssFeedService
from feedhub.services.feed_validator import FeedValidator

from tests.fakes import FakeContentStore, FakeSourceStore, FakeUserStore


SAMPLE_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <title>Test Feed</title>
    <link>https://example.com</link>
    <description>A test RSS feed</description>
    <item>
      <title>First Article</title>
      <link>https://example.com/article-1</link>
      <guid>article-1</guid>
      <description>Description of the &lt;b&gt;first&lt;/b&gt; article</description>
      <author>alice@example.com (Alice)</author>
      <category>Tech</category>
      <pubDate>Thu, 13 Feb 2026 10:00:00 GMT</pubDate>
    </item>
    <item>
      <title>Second Article</title>
      <link>https://example.com/article-2</link>
      <guid>article-2</guid>
      <description>Description of the second article</description>
      <pubDate>Thu, 13 Feb 2026 09:00:00 GMT</pubDate>
    </item>
  </channel>
</rss>"""

SAMPLE_ATOM_XML = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>Test Atom Feed</title>
  <link href="https://example.com"/>
  <subtitle>A test Atom feed</subtitle>
  <id>urn:uuid:feed</id>
  <updated>2026-02-13T10:00:00Z</updated>
  <entry>
    <title>Atom Entry 1</title>
    <link href="https://example.com/entry-1"/>
    <id>urn:uuid:entry-1</id>
    <summary>Summary of entry 1</summary>
    <updated>2026-02-13T10:00:00Z</updated>
  </entry>
</feed>"""

UNTITLED_RSS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
  <channel>
    <link>https://example.com</link>
    <item>
      <title>Only Item</title>
      <link>https://example.com/only</link>
    </item>
  </channel>
</rss>"""

SAMPLE_HTML_PAGE = """<!DOCTYPE html>
<html>
  <head>
    <title>Example</title>
    <link rel="stylesheet" href="/style.css">
    <link rel="alternate" type="application/rss+xml" title="Example RSS" href="/feed.xml">
  </head>
  <body><p>Welcome</p></body>
</html>"""

PLAIN_HTML_PAGE = """<!DOCTYPE html>
<html>
  <head><title>No feeds here</title></head>
  <body><p>Nothing to see</p></body>
</html>"""

RSS_TYPE = "application/rss+xml"
ATOM_TYPE = "application/atom+xml"
HTML_TYPE = "text/html; charset=utf-8"


def rss_feed(*items, title="Test Feed"):
    """Build an RSS document from (title, link) pairs"""
    entries = "".join(
        f"<item><title>{item_title}</title><link>{link}</link></item>"
        for item_title, link in items
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<rss version="2.0"><channel><title>{title}</title>'
        f"<link>https://example.com</link>{entries}</channel></rss>"
    )


def _route_key(url: httpx.URL):
    return (url.host, url.path or "/")


def make_transport(routes, calls=None):
    """
    httpx transport that serves canned responses.

    ``routes`` maps a URL to (status, body, content type), or to an exception
    instance to raise. Unknown URLs answer 404. Requested URLs are appended
    to ``calls`` when given. Routes added after creation are served too.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(str(request.url))

        table = {_route_key(httpx.URL(url)): value for url, value in routes.items()}
        route = table.get(_route_key(request.url))
        if route is None:
            return httpx.Response(404, text="Not Found")
        if isinstance(route, Exception):
            raise route

        status_code, body, content_type = route
        return httpx.Response(status_code, text=body, headers={"content-type": content_type})

    return httpx.MockTransport(handler)


def make_parser(routes, calls=None):
    return FeedParser(timeout=5, user_agent="feedhub-tests", transport=make_transport(routes, calls))


def make_feed_service(routes, sources=None, contents=None, calls=None):
    parser = make_parser(routes, calls)
    validator = FeedValidator(parser)
    return RssFeedService(
        sources if sources is not None else FakeSourceStore(),
        contents if contents is not None else FakeContentStore(),
        parser=parser,
        validator=validator,
        discovery=FeedDiscovery(parser, validator),
    )


@pytest.fixture
def source_store():
    return FakeSourceStore()


@pytest.fixture
def content_store():
    return FakeContentStore()


@pytest.fixture
def user_store():
    return FakeUserStore()


@pytest.fixture
def feed_routes():
    """Canned HTTP responses; tests add to this before making requests"""
    return {
        "https://example.com/feed.xml": (200, SAMPLE_RSS_XML, RSS_TYPE),
        "https://example.com/atom.xml": (200, SAMPLE_ATOM_XML, ATOM_TYPE),
        "https://example.com/": (200, SAMPLE_HTML_PAGE, HTML_TYPE),
    }


@pytest.fixture
def client(source_store, content_store, user_store, feed_routes):
    """
    Test client backed by in-memory stores and a mocked network.

    The client is entered before the fakes are installed so the lifespan
    wiring is replaced, and all requests share the client's event loop.
    """
    original_state = dict(app.state._state)

    with TestClient(app) as test_client:
        feed_service = make_feed_service(feed_routes, source_store, content_store)

        app.state.source_repository = source_store
        app.state.content_repository = content_store
        app.state.user_repository = user_store
        app.state.feed_service = feed_service
        app.state.feed_refresh_scheduler = FeedRefreshScheduler(feed_service)

        test_client.headers.update({"X-Auth-Uid": "user-1", "X-Auth-Email": "user1@example.com"})
        yield test_client

    app.state._state.clear()
    app.state._state.update(original_state)


@pytest.fixture
def admin_client(client, user_store):
    """The same client, authenticated as an administrator"""
    user_store.add_user("admin-1", role=UserRole.ADMIN)
    client.headers.update({"X-Auth-Uid": "admin-1"})
    return client
