"""User profiles: subscription tier and the free tier's daily search quota."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

from ..config import DEFAULT_APP_CONFIG

FREE = "free"
PREMIUM = "premium"

_profiles: dict[str, dict[str, Any]] = {}


def _today() -> str:
    return datetime.now(timezone.utc).date().isoformat()


def create_profile(user_id: str) -> dict[str, Any]:
    profile = {
        "user_id": user_id,
        "subscription_type": FREE,
        "searches_today": 0,
        "last_search_date": None,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    _profiles[user_id] = profile
    return profile


def get_profile(user_id: str) -> dict[str, Any]:
    """Return the profile for *user_id*, creating a free one if missing."""
    return _profiles.get(user_id) or create_profile(user_id)


def searches_used(profile: dict[str, Any], today: str | None = None) -> int:
    if profile["last_search_date"] != (today or _today()):
        return 0
    return profile["searches_today"]


def remaining_searches(
    profile: dict[str, Any],
    limit: int = DEFAULT_APP_CONFIG.free_daily_search_limit,
) -> int | None:
    """Searches left today, or ``None`` for unlimited (premium)."""
    if profile["subscription_type"] == PREMIUM:
        return None
    return max(0, limit - searches_used(profile))


def can_search(
    profile: dict[str, Any],
    limit: int = DEFAULT_APP_CONFIG.free_daily_search_limit,
) -> bool:
    remaining = remaining_searches(profile, limit)
    return remaining is None or remaining > 0


def increment_search_count(user_id: str, today: date | None = None) -> dict[str, Any]:
    profile = get_profile(user_id)
    day = today.isoformat() if today else _today()
    if profile["last_search_date"] != day:
        profile["searches_today"] = 1
    else:
        profile["searches_today"] += 1
    profile["last_search_date"] = day
    return profile


def set_subscription(user_id: str, subscription_type: str) -> dict[str, Any] | None:
    profile = _profiles.get(user_id)
    if profile is None:
        return None
    profile["subscription_type"] = subscription_type
    return profile


def clear_profiles() -> None:
    _profiles.clear()
