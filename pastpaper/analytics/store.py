from __future__ import annotations

import time
from typing import Any

_events: list[dict[str, Any]] = []


def record_event(event_type: str, data: dict[str, Any]) -> None:
    _events.append({
        "type": event_type,
        "timestamp": time.time(),
        **data,
    })


def get_events() -> list[dict[str, Any]]:
    return _events


def get_search_history(user_id: str, limit: int = 10) -> list[dict[str, Any]]:
    """Most recent searches made by *user_id*, newest first."""
    searches = [
        e for e in _events
        if e["type"] == "search" and e.get("user_id") == user_id
    ]
    return list(reversed(searches))[:limit]


def count_searches(user_id: str) -> int:
    return sum(1 for e in _events if e["type"] == "search" and e.get("user_id") == user_id)


def clear_events() -> None:
    _events.clear()
