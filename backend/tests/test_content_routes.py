"""
Tests for content listing and status/priority routes.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from feedhub.models import ContentPriority, ContentStatus


@pytest.fixture
def current_user(user_store):
    return user_store.add_user("user-1")


@pytest.fixture
def source(source_store, current_user):
    return source_store.add_source(current_user.id)


@pytest.fixture
def items(content_store, source):
    now = datetime.now(timezone.utc)
    older = content_store.add_content(
        source.id, "https://example.com/older",
        title="Older", published_at=now - timedelta(days=1), status=ContentStatus.READ,
    )
    newer = content_store.add_content(
        source.id, "https://example.com/newer",
        title="Newer", published_at=now, item_metadata={"readTime": 4},
    )
    return older, newer


@pytest.fixture
def foreign_item(source_store, content_store, user_store):
    other = user_store.add_user("user-2")
    theirs = source_store.add_source(other.id)
    return content_store.add_content(theirs.id, "https://example.com/theirs")


class TestListContents:

    def test_newest_first(self, client, source, items):
        older, newer = items

        response = client.get(f"/api/sources/{source.id}/contents")

        assert response.status_code == 200
        body = response.json()
        assert [item["id"] for item in body] == [str(newer.id), str(older.id)]
        assert body[0]["metadata"] == {"readTime": 4}
        assert body[0]["status"] == "UNREAD"
        assert body[0]["priority"] == "MEDIUM"

    def test_status_filter(self, client, source, items):
        older, _ = items

        response = client.get(f"/api/sources/{source.id}/contents", params={"status": "READ"})

        assert [item["id"] for item in response.json()] == [str(older.id)]

    def test_pagination(self, client, source, items):
        older, _ = items

        response = client.get(f"/api/sources/{source.id}/contents", params={"limit": 1, "offset": 1})

        assert [item["id"] for item in response.json()] == [str(older.id)]

    @pytest.mark.parametrize("limit", [0, 101])
    def test_limit_bounds(self, client, source, limit):
        response = client.get(f"/api/sources/{source.id}/contents", params={"limit": limit})
        assert response.status_code == 422

    def test_foreign_source(self, client, current_user, foreign_item):
        response = client.get(f"/api/sources/{foreign_item.source_id}/contents")
        assert response.status_code == 403

    def test_missing_source(self, client):
        response = client.get(f"/api/sources/{uuid.uuid4()}/contents")
        assert response.status_code == 404


class TestUpdateContent:

    def test_update_status(self, client, items):
        _, newer = items

        response = client.patch(f"/api/contents/{newer.id}/status", json={"status": "ARCHIVED"})

        assert response.status_code == 200
        assert response.json()["status"] == "ARCHIVED"
        assert newer.status == ContentStatus.ARCHIVED

    def test_update_priority(self, client, items):
        _, newer = items

        response = client.patch(f"/api/contents/{newer.id}/priority", json={"priority": "URGENT"})

        assert response.status_code == 200
        assert newer.priority == ContentPriority.URGENT

    def test_invalid_status(self, client, items):
        _, newer = items

        response = client.patch(f"/api/contents/{newer.id}/status", json={"status": "STARRED"})

        assert response.status_code == 422

    def test_missing_content(self, client, current_user):
        response = client.patch(f"/api/contents/{uuid.uuid4()}/status", json={"status": "READ"})
        assert response.status_code == 404

    def test_foreign_content(self, client, current_user, foreign_item):
        response = client.patch(f"/api/contents/{foreign_item.id}/status", json={"status": "READ"})

        assert response.status_code == 403
        assert foreign_item.status == ContentStatus.UNREAD
