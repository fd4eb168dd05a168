"""
TTL cache of ranked search results.

Entries are keyed on the trimmed query, the subject filter exactly as given
and the question store version. Writing a new entry drops expired entries and
entries from older store versions.
"""
from __future__ import annotations

import hashlib
import logging
import time
from typing import Any

from ..config import DEFAULT_APP_CONFIG

logger = logging.getLogger(__name__)

_cache: dict[str, tuple[float, int, Any]] = {}
_hits: int = 0
_misses: int = 0


def _make_key(query: str, subject: str, store_version: int) -> str:
    # subject verbatim: the ranker treats only the exact string "all" as unfiltered
    raw = f"{store_version}\x1f{subject}\x1f{query.strip()}"
    return hashlib.sha256(raw.encode()).hexdigest()[:16]


def get_cached_results(
    query: str,
    subject: str,
    store_version: int,
    ttl: float = DEFAULT_APP_CONFIG.search_cache_ttl,
) -> Any | None:
    global _hits, _misses
    key = _make_key(query, subject, store_version)
    entry = _cache.get(key)
    if entry and time.time() - entry[0] < ttl:
        _hits += 1
        logger.debug("Search cache hit %s", key)
        return entry[2]
    if entry:
        del _cache[key]
    _misses += 1
    return None


def store_results(
    query: str,
    subject: str,
    store_version: int,
    results: Any,
    ttl: float = DEFAULT_APP_CONFIG.search_cache_ttl,
) -> None:
    now = time.time()
    stale = [
        key for key, (created_at, version, _) in _cache.items()
        if version != store_version or now - created_at >= ttl
    ]
    for key in stale:
        del _cache[key]
    _cache[_make_key(query, subject, store_version)] = (now, store_version, results)


def get_cache_stats() -> dict:
    total = _hits + _misses
    return {
        "size": len(_cache),
        "hits": _hits,
        "misses": _misses,
        "hit_rate": round(_hits / total * 100, 1) if total > 0 else 0.0,
    }


def clear_cache() -> None:
    global _hits, _misses
    _cache.clear()
    _hits = 0
    _misses = 0
