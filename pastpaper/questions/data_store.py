from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pandas as pd

from ..config import DEFAULT_APP_CONFIG

logger = logging.getLogger(__name__)

QUESTION_COLUMNS: list[str] = [
    "id",
    "subject",
    "year",
    "session",
    "paper_number",
    "question_text",
    "mark_scheme",
    "keywords",
    "created_at",
]

_df: pd.DataFrame | None = None
_version: int = 0


def parse_keywords(raw: Any) -> list[str]:
    """Turn a comma-separated string (or list) into a clean keyword list."""
    if isinstance(raw, (list, tuple)):
        items = raw
    elif raw is None or pd.isna(raw):
        return []
    else:
        items = str(raw).split(",")
    return [str(k).strip() for k in items if str(k).strip()]


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _load(path: Path = DEFAULT_APP_CONFIG.questions_csv) -> pd.DataFrame:
    df = pd.read_csv(path, dtype=str, keep_default_na=False)

    df["year"] = pd.to_numeric(df["year"], errors="coerce").fillna(0).astype(int)
    df["keywords"] = df["keywords"].apply(parse_keywords)
    if "created_at" not in df.columns:
        df["created_at"] = _now_iso()

    logger.info("Loaded %d questions from %s", len(df), path)
    return df[QUESTION_COLUMNS].reset_index(drop=True)


def get_dataframe() -> pd.DataFrame:
    """Return the in-memory question DataFrame, loading it on first call."""
    global _df
    if _df is None:
        _df = _load()
    return _df


def get_version() -> int:
    """Counter bumped on every mutation; used to key cached search results."""
    return _version


def _touch() -> None:
    global _version
    _version += 1


def reset_store(path: Path | None = None) -> None:
    """Reload the seed file, dropping every runtime change."""
    global _df
    _df = _load(path) if path else _load()
    _touch()


def _row_to_dict(row: pd.Series) -> dict[str, Any]:
    record = row.to_dict()
    record["year"] = int(record["year"])
    record["keywords"] = list(record["keywords"])
    return record


def get_question(question_id: str) -> dict[str, Any] | None:
    df = get_dataframe()
    matches = df[df["id"] == question_id]
    if matches.empty:
        return None
    return _row_to_dict(matches.iloc[0])


def list_questions(
    subject: str | None = None,
    year: int | None = None,
    search_term: str | None = None,
) -> list[dict[str, Any]]:
    """Admin listing, newest first, with optional exact subject/year and free-text filter."""
    df = get_dataframe()
    mask = pd.Series(True, index=df.index)

    if search_term:
        term = search_term.lower()
        mask &= (
            df["question_text"].str.lower().str.contains(term, regex=False)
            | df["mark_scheme"].str.lower().str.contains(term, regex=False)
            | df["keywords"].apply(lambda kws: any(term in k.lower() for k in kws))
        )
    if subject and subject != "all":
        mask &= df["subject"] == subject
    if year is not None:
        mask &= df["year"] == year

    selected = df.loc[mask].sort_values("created_at", ascending=False, kind="stable")
    return [_row_to_dict(row) for _, row in selected.iterrows()]


def add_question(data: dict[str, Any]) -> dict[str, Any]:
    global _df
    df = get_dataframe()
    record = {
        "id": uuid.uuid4().hex,
        "subject": data["subject"],
        "year": int(data["year"]),
        "session": data["session"],
        "paper_number": str(data["paper_number"]),
        "question_text": data["question_text"],
        "mark_scheme": data["mark_scheme"],
        "keywords": parse_keywords(data.get("keywords", [])),
        "created_at": _now_iso(),
    }
    new_row = pd.DataFrame([record], columns=QUESTION_COLUMNS)
    _df = pd.concat([df, new_row], ignore_index=True) if not df.empty else new_row
    _touch()
    return dict(record)


def update_question(question_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
    global _df
    records = get_dataframe().to_dict(orient="records")
    for record in records:
        if record["id"] != question_id:
            continue
        for key, value in changes.items():
            if key not in QUESTION_COLUMNS or key in ("id", "created_at") or value is None:
                continue
            if key == "keywords":
                value = parse_keywords(value)
            elif key == "year":
                value = int(value)
            record[key] = value
        _df = pd.DataFrame(records, columns=QUESTION_COLUMNS)
        _touch()
        return dict(record)
    return None


def delete_question(question_id: str) -> bool:
    global _df
    df = get_dataframe()
    mask = df["id"] == question_id
    if not mask.any():
        return False
    _df = df.loc[~mask].reset_index(drop=True)
    _touch()
    return True


def count_questions_since(since_iso: str) -> int:
    df = get_dataframe()
    return int((df["created_at"] >= since_iso).sum())
