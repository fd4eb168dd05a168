"""
Lexical relevance ranking for pasted exam questions.

``calculate_similarity`` scores one question against a query by token
overlap with the question text and its curated keywords. ``search_questions``
scores a whole corpus and returns the best matches.

A query token that matches both the question text and a keyword contributes
0.6 + 0.8 before normalisation, so a single strong token can saturate the
score at 1.0.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

import pandas as pd

EXACT_PHRASE_SCORE = 0.9
TEXT_MATCH_WEIGHT = 0.6
KEYWORD_MATCH_WEIGHT = 0.8
MIN_TOKEN_LENGTH = 3
SIMILARITY_THRESHOLD = 0.2
MAX_RESULTS = 10


def _partial_match(token: str, candidates: Iterable[str]) -> bool:
    return any(c in token or token in c for c in candidates)


def calculate_similarity(query: str, question_text: str, keywords: Sequence[str]) -> float:
    """Return a similarity in ``[0.0, 1.0]`` between *query* and one question."""
    query_lower = query.lower()
    question_lower = question_text.lower()

    if query_lower in question_lower:
        return EXACT_PHRASE_SCORE

    query_words = [w for w in query_lower.split() if len(w) >= MIN_TOKEN_LENGTH]
    if not query_words:
        return 0.0

    question_words = question_lower.split()
    keyword_words = [k.lower() for k in keywords]

    match_score = 0.0
    for word in query_words:
        if _partial_match(word, question_words):
            match_score += TEXT_MATCH_WEIGHT

    for word in query_words:
        if _partial_match(word, keyword_words):
            match_score += KEYWORD_MATCH_WEIGHT

    return min(match_score / len(query_words), 1.0)


def _keyword_list(raw: Any) -> list[str]:
    """List-like keywords as a list; missing means none. A bare string is rejected."""
    if pd.api.types.is_list_like(raw):
        return [str(k) for k in raw]
    if raw is None or pd.isna(raw):
        return []
    raise TypeError(f"keywords must be a list of str, not {type(raw).__name__}")


def _as_frame(questions: pd.DataFrame | Iterable[Mapping[str, Any]]) -> pd.DataFrame:
    if isinstance(questions, pd.DataFrame):
        return questions
    return pd.DataFrame([dict(q) for q in questions])


def filter_by_subject(df: pd.DataFrame, subject_filter: str | None) -> pd.DataFrame:
    """Restrict to one subject (case-insensitive equality); ``"all"`` keeps everything."""
    if not subject_filter or subject_filter == "all" or df.empty:
        return df
    return df[df["subject"].str.lower() == subject_filter.lower()]


def search_questions(
    query: str,
    questions: pd.DataFrame | Iterable[Mapping[str, Any]],
    subject_filter: str | None = None,
) -> list[dict[str, Any]]:
    """
    Rank *questions* against *query*.

    Returns at most ``MAX_RESULTS`` records scoring above
    ``SIMILARITY_THRESHOLD``, best first. Each record is a copy of the input
    row with a ``similarity`` field added. Equal scores keep their input
    order (stable sort); no other tie-break is applied.
    """
    if not isinstance(query, str):
        raise TypeError(f"query must be a str, not {type(query).__name__}")
    if not query.strip():
        return []

    candidates = filter_by_subject(_as_frame(questions), subject_filter)
    if candidates.empty:
        return []

    scores = [
        calculate_similarity(query, str(text), _keyword_list(kws))
        for text, kws in zip(candidates["question_text"], candidates["keywords"])
    ]
    scored = candidates.assign(similarity=scores)
    scored = scored[scored["similarity"] > SIMILARITY_THRESHOLD]
    top = scored.sort_values("similarity", ascending=False, kind="stable").head(MAX_RESULTS)
    return top.to_dict(orient="records")
