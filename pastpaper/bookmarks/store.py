from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..questions.data_store import get_question

_bookmarks: dict[str, dict[str, str]] = {}


def add_bookmark(user_id: str, question_id: str) -> bool:
    """Bookmark a question. Returns ``False`` if the question does not exist."""
    if get_question(question_id) is None:
        return False
    user_marks = _bookmarks.setdefault(user_id, {})
    user_marks.setdefault(question_id, datetime.now(timezone.utc).isoformat())
    return True


def remove_bookmark(user_id: str, question_id: str) -> bool:
    return _bookmarks.get(user_id, {}).pop(question_id, None) is not None


def bookmarked_ids(user_id: str) -> set[str]:
    return set(_bookmarks.get(user_id, {}))


def list_bookmarks(user_id: str) -> list[dict[str, Any]]:
    """Bookmarked questions, newest bookmark first; deleted questions are skipped."""
    marks = sorted(_bookmarks.get(user_id, {}).items(), key=lambda kv: kv[1], reverse=True)
    items: list[dict[str, Any]] = []
    for question_id, created_at in marks:
        question = get_question(question_id)
        if question is not None:
            items.append({"question": question, "created_at": created_at})
    return items


def clear_bookmarks() -> None:
    _bookmarks.clear()
