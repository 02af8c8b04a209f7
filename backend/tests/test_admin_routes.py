"""
Tests for the admin feed refresh routes.
"""

from datetime import datetime, timedelta, timezone

import pytest

from feedhub.main import app


@pytest.fixture
def refresh_scheduler(client):
    return app.state.feed_refresh_scheduler


class TestAdminAccess:

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/admin/feed-refresh/status"),
        ("post", "/api/admin/feed-refresh/start"),
        ("post", "/api/admin/feed-refresh/stop"),
        ("post", "/api/admin/feed-refresh/run"),
    ])
    def test_regular_user_is_forbidden(self, client, method, path):
        response = getattr(client, method)(path)

        assert response.status_code == 403
        assert response.json()["detail"] == "Admin access required"

    def test_anonymous_is_rejected(self, client):
        del client.headers["X-Auth-Uid"]

        response = client.get("/api/admin/feed-refresh/status")

        assert response.status_code == 401


class TestSchedulerControl:

    def test_status_when_stopped(self, admin_client):
        response = admin_client.get("/api/admin/feed-refresh/status")

        assert response.status_code == 200
        assert response.json() == {"isRunning": False}

    def test_start_and_stop(self, admin_client, refresh_scheduler):
        response = admin_client.post("/api/admin/feed-refresh/start", json={"checkIntervalMinutes": 10})

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Feed refresh service started"}
        assert admin_client.get("/api/admin/feed-refresh/status").json() == {"isRunning": True}
        assert refresh_scheduler.check_interval_minutes == 10

        response = admin_client.post("/api/admin/feed-refresh/stop")

        assert response.json() == {"success": True, "message": "Feed refresh service stopped"}
        assert admin_client.get("/api/admin/feed-refresh/status").json() == {"isRunning": False}

    def test_start_defaults_to_five_minutes(self, admin_client, refresh_scheduler):
        response = admin_client.post("/api/admin/feed-refresh/start")

        assert response.status_code == 200
        assert refresh_scheduler.check_interval_minutes == 5

    @pytest.mark.parametrize("interval", [0, 61])
    def test_start_interval_bounds(self, admin_client, refresh_scheduler, interval):
        response = admin_client.post("/api/admin/feed-refresh/start", json={"checkIntervalMinutes": interval})

        assert response.status_code == 422
        assert refresh_scheduler.is_running is False

    def test_stop_when_stopped(self, admin_client):
        response = admin_client.post("/api/admin/feed-refresh/stop")

        assert response.status_code == 200
        assert response.json()["success"] is True


class TestRunCycle:

    def test_run_cycle(self, admin_client, source_store, user_store, content_store):
        owner = user_store.add_user("reader")
        stale = datetime.now(timezone.utc) - timedelta(hours=2)
        good = source_store.add_source(owner.id, last_fetched=stale)
        bad = source_store.add_source(owner.id, url="https://example.com/missing.xml")
        source_store.add_source(owner.id, last_fetched=datetime.now(timezone.utc))

        response = admin_client.post("/api/admin/feed-refresh/run")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        result = body["result"]
        assert result["totalProcessed"] == 2
        assert result["successfulSources"] == 1
        assert result["newItemsCount"] == 2
        assert result["updatedItemsCount"] == 0
        assert [failed["id"] for failed in result["failedSources"]] == [str(bad.id)]
        assert "HTTP error: 404" in result["failedSources"][0]["error"]
        assert good.last_fetched > stale
        assert len(content_store.for_source(good.id)) == 2

    def test_run_cycle_with_nothing_due(self, admin_client):
        response = admin_client.post("/api/admin/feed-refresh/run")

        assert response.json() == {
            "success": True,
            "result": {
                "totalProcessed": 0,
                "successfulSources": 0,
                "failedSources": [],
                "newItemsCount": 0,
                "updatedItemsCount": 0,
            },
        }
