from __future__ import annotations

import logging
import time
from typing import Any

from ..analytics.store import record_event
from ..auth.profiles import can_search, get_profile, increment_search_count, remaining_searches
from ..bookmarks.store import bookmarked_ids
from ..questions.data_store import get_dataframe, get_version
from ..questions.models import QuestionOut
from .cache import get_cached_results, store_results
from .models import SearchRequest, SearchResponse, SearchResultItem
from .ranking import filter_by_subject, search_questions

logger = logging.getLogger(__name__)

LIMIT_REACHED_MESSAGE = (
    "You have reached your daily search limit. "
    "Upgrade to Premium for unlimited searches!"
)


class SearchLimitReached(Exception):
    """A free-tier user has used up today's searches."""


def _to_item(record: dict[str, Any], marked: set[str]) -> SearchResultItem:
    similarity = record.pop("similarity")
    return SearchResultItem(
        question=QuestionOut(**record),
        similarity=float(similarity),
        bookmarked=record["id"] in marked,
    )


def get_search_results(request: SearchRequest, user: dict | None = None) -> SearchResponse:
    start_time = time.time()
    query = request.query.strip()
    user_id = user["user_id"] if user else None

    profile = get_profile(user_id) if user_id else None
    if not query:
        return SearchResponse(
            query=query,
            subject=request.subject,
            results=[],
            total_candidates=0,
            searches_remaining=remaining_searches(profile) if profile else None,
        )

    if profile is not None and not can_search(profile):
        logger.warning("Daily search limit reached for user %s", user_id)
        raise SearchLimitReached(LIMIT_REACHED_MESSAGE)

    # --- Cache check ---
    version = get_version()
    cached = get_cached_results(query, request.subject, version)
    cache_hit = cached is not None
    if cached is None:
        df = get_dataframe()
        total_candidates = len(filter_by_subject(df, request.subject))
        ranked = search_questions(query, df, request.subject)
        cached = {"records": ranked, "total_candidates": total_candidates}
        store_results(query, request.subject, version, cached)

    marked = bookmarked_ids(user_id) if user_id else set()
    items = [_to_item(dict(r), marked) for r in cached["records"]]

    if user_id:
        profile = increment_search_count(user_id)

    elapsed_ms = round((time.time() - start_time) * 1000, 1)
    record_event("search", {
        "user_id": user_id,
        "query": query,
        "subject": request.subject,
        "results_count": len(items),
        "total_candidates": cached["total_candidates"],
        "response_time_ms": elapsed_ms,
        "cache_hit": cache_hit,
    })

    return SearchResponse(
        query=query,
        subject=request.subject,
        results=items,
        total_candidates=cached["total_candidates"],
        searches_remaining=remaining_searches(profile) if profile else None,
    )
