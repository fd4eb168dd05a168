from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi.testclient import TestClient

from pastpaper.analytics.aggregator import compute_analytics, subject_popularity
from pastpaper.app import app

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"email": "student@example.com", "password": "student123"})


def _login_admin(c):
    c.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})


def test_dashboard_counts():
    user = TestClient(app)
    _login_user(user)
    user.post("/search", json={"query": "enzymes", "subject": "Biology"})
    user.post("/search", json={"query": "photosynthesis", "subject": "Biology"})

    _login_admin(client)
    body = client.get("/admin/dashboard").json()
    assert body["total_questions"] == 12
    assert body["total_searches"] == 2
    assert body["searches_today"] == 2
    assert body["total_users"] >= 2
    assert body["premium_users"] == 0
    assert body["popular_subjects"][0] == {"subject": "Biology", "count": 2}


def test_analytics_empty():
    _login_admin(client)
    resp = client.get("/admin/analytics", params={"range": "7d"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_searches"] == 0
    assert len(body["daily_searches"]) == 7
    assert body["search_trends"] == []
    assert body["avg_response_time_ms"] == 0.0


def test_analytics_tracks_searches():
    user = TestClient(app)
    _login_user(user)
    user.post("/search", json={"query": "maximum height reached"})
    user.post("/search", json={"query": "Maximum height reached "})
    user.post("/search", json={"query": "ohm"})

    _login_admin(client)
    body = client.get("/admin/analytics").json()
    assert body["time_range"] == "30d"
    assert len(body["daily_searches"]) == 30
    assert body["daily_searches"][-1]["count"] == 3
    assert body["total_searches"] == 3
    # short queries are not trends; case and whitespace are folded
    assert body["search_trends"] == [{"query": "maximum height reached", "count": 2}]


def test_analytics_rejects_bad_range():
    _login_admin(client)
    assert client.get("/admin/analytics", params={"range": "1y"}).status_code == 422


def test_subject_popularity_uses_filter_then_query_text():
    searches = [
        {"subject": "Physics", "query": "anything"},
        {"subject": "all", "query": "mathematics and physics question"},
        {"subject": "all", "query": "no subject named"},
    ]
    assert subject_popularity(searches) == [
        {"subject": "Physics", "count": 2},
        {"subject": "Mathematics", "count": 1},
    ]


def test_compute_analytics_buckets_by_day():
    today = datetime.now(timezone.utc).date()
    now = time.time()
    events = [
        {"type": "search", "timestamp": now, "query": "a long enough query", "subject": "all"},
        {"type": "search", "timestamp": now - 86400 * 2, "query": "short", "subject": "Biology"},
        {"type": "search", "timestamp": now - 86400 * 40, "query": "too old to count", "subject": "all"},
    ]
    users = [{"created_at": "2000-01-01T00:00:00+00:00"}]
    result = compute_analytics(events, users, "7d", today=today)
    assert result["total_searches"] == 2
    assert result["new_users"] == 0
    assert sum(d["count"] for d in result["daily_searches"]) == 2
