"""Tests for the activity log service and its console endpoints."""

from __future__ import annotations

import pytest

from estatedesk.logging_service import log_manager
from estatedesk.models import SystemLog


def _record(**overrides):
    values = {
        "component": "Properties",
        "action": "create",
        "title": "Property added",
        "user_summary": "Lakeside Plot added.",
        "technical_details": "properties.create stored property_id=1.",
    }
    values.update(overrides)
    return log_manager.record(**values)


def test_record_rejects_unknown_level(app):
    with app.app_context():
        with pytest.raises(ValueError):
            _record(level="debug")


def test_old_entries_are_trimmed(app):
    app.config["LOG_RETENTION"] = 3
    with app.app_context():
        for index in range(5):
            _record(title=f"Entry {index}")

        titles = [entry.title for entry in SystemLog.query.order_by(SystemLog.id)]
        assert titles == ["Entry 2", "Entry 3", "Entry 4"]


def test_fetch_logs_filters(app):
    with app.app_context():
        _record(user_id=1)
        _record(user_id=1, component="Sales", level="warn", title="Sold at a loss")
        _record(user_id=2, title="Someone else")

        assert [entry["title"] for entry in log_manager.fetch_logs(user_id=1, level="warn")] == [
            "Sold at a loss"
        ]
        assert len(log_manager.fetch_logs(user_id=1)) == 2
        assert log_manager.fetch_logs(search="someone")[0]["user_id"] == 2


def test_feed_is_scoped_to_signed_in_user(app, auth_client, user_id, other_user_id):
    with app.app_context():
        _record(user_id=other_user_id, title="Private to someone else")

    payload = auth_client.get("/logs/feed").get_json()

    titles = [entry["title"] for entry in payload["logs"]]
    assert "Signed in" in titles
    assert "Private to someone else" not in titles
    assert all(entry["user_id"] == user_id for entry in payload["logs"])
    assert payload["latest"] is not None


def test_feed_filters_by_component(app, auth_client):
    auth_client.get("/properties/")

    payload = auth_client.get("/logs/feed?component=Properties").get_json()

    assert [entry["action"] for entry in payload["logs"]] == ["view"]


def test_console_renders(auth_client):
    response = auth_client.get("/logs/")

    assert response.status_code == 200
    assert b"Activity console accessed" in response.data
