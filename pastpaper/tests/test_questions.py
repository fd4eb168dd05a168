from __future__ import annotations

from fastapi.testclient import TestClient

from pastpaper.app import app

client = TestClient(app)

NEW_QUESTION = {
    "subject": "Physics",
    "year": 2024,
    "session": "May/June",
    "paper_number": "4",
    "question_text": "Define specific heat capacity and state its unit.",
    "mark_scheme": "Energy required per unit mass per unit temperature rise. J/(kg K)",
    "keywords": ["specific heat capacity", " thermal ", ""],
}


def _login_admin(c):
    c.post("/auth/login", json={"email": "admin@example.com", "password": "admin123"})


def test_list_questions():
    _login_admin(client)
    body = client.get("/admin/questions").json()
    assert body["total"] == 12
    assert body["showing"] == 12
    # newest first
    created = [q["created_at"] for q in body["questions"]]
    assert created == sorted(created, reverse=True)


def test_list_questions_filters():
    _login_admin(client)
    body = client.get("/admin/questions", params={"subject": "Mathematics"}).json()
    assert body["showing"] == 3
    assert body["total"] == 12

    body = client.get("/admin/questions", params={"year": 2021}).json()
    assert {q["id"] for q in body["questions"]} == {"q-math-003", "q-chem-002"}

    # search term matches mark scheme and keywords too
    body = client.get("/admin/questions", params={"search": "LIMEWATER"}).json()
    assert [q["id"] for q in body["questions"]] == ["q-chem-001"]
    body = client.get("/admin/questions", params={"search": "power rule"}).json()
    assert [q["id"] for q in body["questions"]] == ["q-math-001"]


def test_add_question_and_find_it_by_search():
    _login_admin(client)
    resp = client.post("/admin/questions", json=NEW_QUESTION)
    assert resp.status_code == 201
    created = resp.json()
    assert created["id"]
    assert created["keywords"] == ["specific heat capacity", "thermal"]

    c = TestClient(app)
    body = c.post("/search", json={"query": "specific heat capacity"}).json()
    assert body["results"][0]["question"]["id"] == created["id"]


def test_add_question_validation():
    _login_admin(client)
    bad = dict(NEW_QUESTION, session="Winter")
    assert client.post("/admin/questions", json=bad).status_code == 422
    bad = dict(NEW_QUESTION, question_text="")
    assert client.post("/admin/questions", json=bad).status_code == 422


def test_get_question():
    _login_admin(client)
    resp = client.get("/admin/questions/q-bio-001")
    assert resp.status_code == 200
    assert resp.json()["subject"] == "Biology"
    assert client.get("/admin/questions/missing").status_code == 404


def test_update_question():
    _login_admin(client)
    resp = client.put(
        "/admin/questions/q-bio-001",
        json={"year": 2020, "paper_number": "3"},
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["paper_number"] == "3"
    assert body["keywords"] == ["enzymes", "digestion", "catalyst"]
    assert body["year"] == 2020
    assert body["subject"] == "Biology"
    assert client.put("/admin/questions/missing", json={"year": 2020}).status_code == 404


def test_update_question_keywords_list():
    _login_admin(client)
    body = client.put(
        "/admin/questions/q-bio-001",
        json={"keywords": ["amylase", "  protease "]},
    ).json()
    assert body["keywords"] == ["amylase", "protease"]


def test_delete_question():
    _login_admin(client)
    resp = client.delete("/admin/questions/q-econ-001")
    assert resp.status_code == 200
    assert client.get("/admin/questions/q-econ-001").status_code == 404
    assert client.delete("/admin/questions/q-econ-001").status_code == 404
    assert client.get("/admin/questions").json()["total"] == 11
