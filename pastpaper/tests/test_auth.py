from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from pastpaper.app import app

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"email": "student@example.com", "password": "student123"})


def _login_admin(c):
    c.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})


# ── Login / Logout / Signup ──────────────────────────────────────────────


def test_login_success_user():
    resp = client.post("/auth/login", json={"email": "student@example.com", "password": "student123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["email"] == "student@example.com"
    assert body["user"]["role"] == "user"
    assert body["user"]["user_id"]


def test_login_success_admin():
    resp = client.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "admin"


def test_login_email_is_case_insensitive():
    resp = client.post("/auth/login", json={"email": "Student@Example.com", "password": "student123"})
    assert resp.status_code == 200


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"email": "student@example.com", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 401


def test_signup_creates_free_account_and_logs_in():
    c = TestClient(app)
    email = f"new-{uuid.uuid4().hex[:8]}@example.com"
    resp = c.post("/auth/signup", json={"email": email, "password": "secret1"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "user"

    me = c.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["email"] == email

    profile = c.get("/profile").json()
    assert profile["subscription_type"] == "free"
    assert profile["searches_remaining"] == 3


def test_signup_duplicate_email():
    resp = client.post("/auth/signup", json={"email": "student@example.com", "password": "another1"})
    assert resp.status_code == 409


def test_signup_rejects_short_password():
    resp = client.post("/auth/signup", json={"email": "short@example.com", "password": "123"})
    assert resp.status_code == 422


def test_auth_me_when_logged_in():
    _login_user(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["email"] == "student@example.com"


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401


def test_logout():
    _login_user(client)
    resp = client.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "logged_out"
    # Session should be cleared
    resp = client.get("/auth/me")
    assert resp.status_code == 401


# ── Route protection ─────────────────────────────────────────────────────


def test_bookmarks_require_login():
    c = TestClient(app)
    assert c.get("/bookmarks").status_code == 401
    assert c.post("/bookmarks", json={"question_id": "q-math-001"}).status_code == 401


def test_history_requires_login():
    c = TestClient(app)
    assert c.get("/history").status_code == 401


def test_admin_questions_require_admin():
    _login_user(client)
    assert client.get("/admin/questions").status_code == 403


def test_admin_questions_require_login():
    c = TestClient(app)
    assert c.get("/admin/questions").status_code == 401


def test_admin_dashboard_allowed_for_admin():
    _login_admin(client)
    assert client.get("/admin/dashboard").status_code == 200


def test_cache_stats_requires_admin():
    c = TestClient(app)
    _login_user(c)
    assert c.get("/cache/stats").status_code == 403


def test_added_admin_email_grants_access():
    admin = TestClient(app)
    _login_admin(admin)
    resp = admin.post("/admin/settings/admin-emails", json={"email": "student@example.com"})
    assert resp.status_code == 200
    assert "student@example.com" in resp.json()["admin_emails"]

    c = TestClient(app)
    _login_user(c)
    assert c.get("/admin/dashboard").status_code == 200


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").status_code == 200


def test_metadata_is_public():
    c = TestClient(app)
    resp = c.get("/metadata")
    assert resp.status_code == 200
    body = resp.json()
    assert "Mathematics" in body["subjects"]
    assert body["sessions"] == ["May/June", "Oct/Nov"]
    assert 2023 in body["years"]


def test_search_is_public():
    c = TestClient(app)
    assert c.post("/search", json={"query": "maximum height"}).status_code == 200


def test_admin_settings():
    _login_admin(client)
    body = client.get("/admin/settings").json()
    assert body["admin_emails"] == ["admin@example.com"]
    assert body["free_daily_search_limit"] == 3
    assert body["total_questions"] == 12
