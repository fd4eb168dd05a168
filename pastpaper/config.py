from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

_DEFAULT_QUESTIONS_CSV = Path(__file__).resolve().parent / "data" / "questions.csv"


def _split_emails(raw: str) -> tuple[str, ...]:
    return tuple(e.strip().lower() for e in raw.split(",") if e.strip())


@dataclass(frozen=True)
class AppConfig:
    session_secret: str = os.getenv("SESSION_SECRET", "pastpaper-secret-change-in-production")
    questions_csv: Path = Path(os.getenv("QUESTIONS_CSV", str(_DEFAULT_QUESTIONS_CSV)))
    admin_emails: tuple[str, ...] = field(
        default_factory=lambda: _split_emails(os.getenv("ADMIN_EMAILS", "admin@example.com"))
    )
    free_daily_search_limit: int = int(os.getenv("FREE_DAILY_SEARCH_LIMIT", "3"))
    search_cache_ttl: int = int(os.getenv("SEARCH_CACHE_TTL", "300"))


DEFAULT_APP_CONFIG = AppConfig()
