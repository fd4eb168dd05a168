from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta, timezone
from typing import Any

from ..questions.models import CAMBRIDGE_SUBJECTS

RANGE_DAYS: dict[str, int] = {"7d": 7, "30d": 30, "90d": 90}
MIN_TREND_QUERY_LENGTH = 10


def _event_day(event: dict[str, Any]) -> str:
    return datetime.fromtimestamp(event["timestamp"], tz=timezone.utc).date().isoformat()


def _iso_day(value: str) -> str:
    return datetime.fromisoformat(value).astimezone(timezone.utc).date().isoformat()


def _subjects_for(search: dict[str, Any]) -> list[str]:
    subject = search.get("subject") or "all"
    if subject != "all":
        return [subject]
    query = search.get("query", "").lower()
    return [s for s in CAMBRIDGE_SUBJECTS if s.lower() in query]


def subject_popularity(searches: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Count searches per subject.

    A search filtered to one subject counts for that subject; an unfiltered
    search counts for every subject named in its query text.
    """
    counter: Counter[str] = Counter()
    for s in searches:
        for subject in _subjects_for(s):
            counter[subject] += 1
    return [{"subject": n, "count": c} for n, c in counter.most_common()]


def _daily_counts(days: list[str], dated: list[str]) -> list[dict[str, Any]]:
    per_day = Counter(dated)
    return [{"date": d, "count": per_day.get(d, 0)} for d in days]


def compute_analytics(
    events: list[dict[str, Any]],
    users: list[dict[str, Any]],
    time_range: str = "30d",
    today: date | None = None,
) -> dict[str, Any]:
    days_back = RANGE_DAYS[time_range]
    today = today or datetime.now(timezone.utc).date()
    start = today - timedelta(days=days_back - 1)
    days = [(start + timedelta(days=i)).isoformat() for i in range(days_back)]

    searches = [
        e for e in events
        if e["type"] == "search" and _event_day(e) >= days[0]
    ]
    total = len(searches)

    daily_searches = _daily_counts(days, [_event_day(s) for s in searches])
    user_growth = _daily_counts(
        days,
        [d for d in (_iso_day(u["created_at"]) for u in users) if d >= days[0]],
    )

    # Search trends: only substantial queries
    query_counter: Counter[str] = Counter()
    for s in searches:
        q = s.get("query", "").lower().strip()
        if len(q) > MIN_TREND_QUERY_LENGTH:
            query_counter[q] += 1
    search_trends = [{"query": q, "count": c} for q, c in query_counter.most_common(10)]

    times = [s["response_time_ms"] for s in searches if "response_time_ms" in s]
    cache_hits = sum(1 for s in searches if s.get("cache_hit"))

    return {
        "time_range": time_range,
        "daily_searches": daily_searches,
        "subject_popularity": subject_popularity(searches),
        "user_growth": user_growth,
        "search_trends": search_trends,
        "total_searches": total,
        "new_users": sum(d["count"] for d in user_growth),
        "avg_searches_per_day": round(total / days_back),
        "avg_response_time_ms": round(sum(times) / len(times), 1) if times else 0.0,
        "cache_hit_rate": round(cache_hits / total * 100, 1) if total else 0.0,
    }


def compute_dashboard_stats(
    events: list[dict[str, Any]],
    users: list[dict[str, Any]],
    profiles: list[dict[str, Any]],
    total_questions: int,
    questions_this_month: int,
) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    today = datetime.now(timezone.utc).date().isoformat()

    return {
        "total_users": len(users),
        "premium_users": sum(1 for p in profiles if p["subscription_type"] == "premium"),
        "total_questions": total_questions,
        "total_searches": len(searches),
        "searches_today": sum(1 for s in searches if _event_day(s) == today),
        "questions_this_month": questions_this_month,
        "popular_subjects": subject_popularity(searches)[:5],
    }
