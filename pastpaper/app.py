from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import RANGE_DAYS, compute_analytics, compute_dashboard_stats
from .analytics.store import count_searches, get_events, get_search_history
from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.profiles import get_profile, remaining_searches, searches_used, set_subscription
from .auth.users import add_admin_email, authenticate, create_user, get_admin_emails, list_users
from .bookmarks.store import add_bookmark, list_bookmarks, remove_bookmark
from .config import DEFAULT_APP_CONFIG
from .questions.bulk_import import TEMPLATE_CSV, CSVFormatError, run_import
from .questions.data_store import (
    add_question,
    count_questions_since,
    delete_question,
    get_dataframe,
    get_question,
    list_questions,
    update_question,
)
from .questions.models import (
    CAMBRIDGE_SUBJECTS,
    SESSIONS,
    BulkImportRequest,
    BulkImportResponse,
    QuestionCreate,
    QuestionListResponse,
    QuestionOut,
    QuestionUpdate,
)
from .search.cache import get_cache_stats
from .search.models import (
    AdminEmailRequest,
    BookmarkOut,
    BookmarkRequest,
    LoginRequest,
    SearchRequest,
    SearchResponse,
    SignupRequest,
    SubscriptionUpdate,
)
from .search.retrieval import SearchLimitReached, get_search_results

logger = logging.getLogger(__name__)

app = FastAPI(title="Cambridge Past Paper Assistant API", version="1.0.0")
app.add_middleware(SessionMiddleware, secret_key=DEFAULT_APP_CONFIG.session_secret)


def _profile_view(user_id: str) -> dict:
    profile = get_profile(user_id)
    return {
        **profile,
        "searches_today": searches_used(profile),
        "searches_remaining": remaining_searches(profile),
    }


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    df = get_dataframe()
    years = sorted({int(y) for y in df["year"]}, reverse=True)
    return {"subjects": CAMBRIDGE_SUBJECTS, "sessions": SESSIONS, "years": years}


@app.post("/search", response_model=SearchResponse)
def search(
    body: SearchRequest,
    user: dict | None = Depends(get_current_user),
) -> SearchResponse:
    try:
        return get_search_results(body, user)
    except SearchLimitReached as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup")
def signup(body: SignupRequest, request: Request) -> dict:
    user = create_user(body.email, body.password)
    if not user:
        raise HTTPException(status_code=409, detail="Email already registered")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/profile")
def profile(user: dict = Depends(require_user)) -> dict:
    return _profile_view(user["user_id"])


@app.get("/history")
def history(
    limit: int = Query(default=10, ge=1, le=100),
    user: dict = Depends(require_user),
) -> list[dict]:
    return [
        {
            "query": e["query"],
            "subject": e["subject"],
            "results_count": e["results_count"],
            "created_at": datetime.fromtimestamp(e["timestamp"], tz=timezone.utc).isoformat(),
        }
        for e in get_search_history(user["user_id"], limit)
    ]


@app.get("/bookmarks", response_model=list[BookmarkOut])
def bookmarks(user: dict = Depends(require_user)) -> list[dict]:
    return list_bookmarks(user["user_id"])


@app.post("/bookmarks")
def create_bookmark(body: BookmarkRequest, user: dict = Depends(require_user)) -> dict:
    if not add_bookmark(user["user_id"], body.question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    return {"status": "bookmarked", "question_id": body.question_id}


@app.delete("/bookmarks/{question_id}")
def delete_bookmark(question_id: str, user: dict = Depends(require_user)) -> dict:
    if not remove_bookmark(user["user_id"], question_id):
        raise HTTPException(status_code=404, detail="Bookmark not found")
    return {"status": "removed", "question_id": question_id}


# ── Admin: questions ─────────────────────────────────────────────────────


@app.get("/admin/questions", response_model=QuestionListResponse)
def admin_list_questions(
    search: str | None = None,
    subject: str | None = None,
    year: int | None = None,
    user: dict = Depends(require_admin),
) -> QuestionListResponse:
    questions = list_questions(subject=subject, year=year, search_term=search)
    return QuestionListResponse(
        questions=[QuestionOut(**q) for q in questions],
        total=len(get_dataframe()),
        showing=len(questions),
    )


@app.post("/admin/questions", response_model=QuestionOut, status_code=201)
def admin_add_question(body: QuestionCreate, user: dict = Depends(require_admin)) -> QuestionOut:
    return QuestionOut(**add_question(body.model_dump()))


@app.get("/admin/questions/template", response_class=PlainTextResponse)
def admin_import_template(user: dict = Depends(require_admin)) -> PlainTextResponse:
    return PlainTextResponse(
        TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="questions_template.csv"'},
    )


@app.post("/admin/questions/import", response_model=BulkImportResponse)
def admin_import_questions(
    body: BulkImportRequest,
    user: dict = Depends(require_admin),
) -> BulkImportResponse:
    try:
        result = run_import(body.csv_data)
    except CSVFormatError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return BulkImportResponse(success=result.success, errors=result.errors, message=result.message)


@app.get("/admin/questions/{question_id}", response_model=QuestionOut)
def admin_get_question(question_id: str, user: dict = Depends(require_admin)) -> QuestionOut:
    question = get_question(question_id)
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return QuestionOut(**question)


@app.put("/admin/questions/{question_id}", response_model=QuestionOut)
def admin_update_question(
    question_id: str,
    body: QuestionUpdate,
    user: dict = Depends(require_admin),
) -> QuestionOut:
    question = update_question(question_id, body.model_dump(exclude_none=True))
    if question is None:
        raise HTTPException(status_code=404, detail="Question not found")
    return QuestionOut(**question)


@app.delete("/admin/questions/{question_id}")
def admin_delete_question(question_id: str, user: dict = Depends(require_admin)) -> dict:
    if not delete_question(question_id):
        raise HTTPException(status_code=404, detail="Question not found")
    return {"status": "deleted", "id": question_id}


# ── Admin: stats ─────────────────────────────────────────────────────────


@app.get("/admin/dashboard")
def admin_dashboard(user: dict = Depends(require_admin)) -> dict:
    users = list_users()
    month_start = datetime.now(timezone.utc).replace(
        day=1, hour=0, minute=0, second=0, microsecond=0,
    )
    return compute_dashboard_stats(
        get_events(),
        users,
        [get_profile(u["user_id"]) for u in users],
        total_questions=len(get_dataframe()),
        questions_this_month=count_questions_since(month_start.isoformat()),
    )


@app.get("/admin/analytics")
def admin_analytics(
    time_range: str = Query(default="30d", alias="range"),
    user: dict = Depends(require_admin),
) -> dict:
    if time_range not in RANGE_DAYS:
        raise HTTPException(status_code=422, detail="range must be one of 7d, 30d, 90d")
    return compute_analytics(get_events(), list_users(), time_range)


@app.get("/cache/stats")
def cache_stats(user: dict = Depends(require_admin)) -> dict:
    return get_cache_stats()


# ── Admin: users & settings ──────────────────────────────────────────────


@app.get("/admin/users")
def admin_users(
    search: str | None = None,
    user: dict = Depends(require_admin),
) -> dict:
    today = datetime.now(timezone.utc).date().isoformat()
    rows = []
    for u in list_users():
        profile = get_profile(u["user_id"])
        rows.append({
            **u,
            "subscription_type": profile["subscription_type"],
            "searches_today": searches_used(profile),
            "last_search_date": profile["last_search_date"],
            "total_searches": count_searches(u["user_id"]),
        })

    stats = {
        "total": len(rows),
        "premium": sum(1 for r in rows if r["subscription_type"] == "premium"),
        "free": sum(1 for r in rows if r["subscription_type"] == "free"),
        "active_today": sum(
            1 for r in rows if r["last_search_date"] == today and r["searches_today"] > 0
        ),
    }
    if search:
        rows = [r for r in rows if search.lower() in r["email"]]
    return {"users": rows, "stats": stats}


@app.put("/admin/users/{user_id}/subscription")
def admin_update_subscription(
    user_id: str,
    body: SubscriptionUpdate,
    user: dict = Depends(require_admin),
) -> dict:
    if not any(u["user_id"] == user_id for u in list_users()):
        raise HTTPException(status_code=404, detail="User not found")
    get_profile(user_id)
    set_subscription(user_id, body.subscription_type)
    return _profile_view(user_id)


@app.get("/admin/settings")
def admin_settings(user: dict = Depends(require_admin)) -> dict:
    return {
        "admin_emails": get_admin_emails(),
        "free_daily_search_limit": DEFAULT_APP_CONFIG.free_daily_search_limit,
        "search_cache_ttl": DEFAULT_APP_CONFIG.search_cache_ttl,
        "total_questions": len(get_dataframe()),
        "total_users": len(list_users()),
    }


@app.post("/admin/settings/admin-emails")
def admin_add_admin_email(body: AdminEmailRequest, user: dict = Depends(require_admin)) -> dict:
    add_admin_email(body.email)
    logger.info("Admin email %s added by %s", body.email, user["email"])
    return {"status": "ok", "admin_emails": get_admin_emails()}
