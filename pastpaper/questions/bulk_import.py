"""
CSV bulk import for the question bank.

Rows are validated independently: valid rows are inserted even when others
fail, and every rejected row is reported as ``"Line N: ..."`` with the header
counted as line 1.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from .data_store import add_question, parse_keywords
from .models import SESSIONS, YEAR_MAX, YEAR_MIN

logger = logging.getLogger(__name__)

IMPORT_COLUMNS: list[str] = [
    "subject",
    "year",
    "session",
    "paper_number",
    "question_text",
    "mark_scheme",
    "keywords",
]

TEMPLATE_CSV = (
    "subject,year,session,paper_number,question_text,mark_scheme,keywords\n"
    'Mathematics,2023,May/June,1,"Calculate the derivative of f(x) = 3x^2 + 2x - 1",'
    '"Step 1: Apply power rule to each term\nf\'(x) = 6x + 2\nStep 2: The derivative is f\'(x) = 6x + 2",'
    '"derivative,calculus,power rule"\n'
    'Physics,2023,Oct/Nov,2,"A ball is thrown vertically upward with initial velocity 20 m/s. '
    'Calculate the maximum height reached.",'
    '"Using v^2 = u^2 + 2as\nAt maximum height, v = 0\n0 = 20^2 + 2(-9.8)s\ns = 400/(2x9.8) = 20.4 m",'
    '"kinematics,projectile motion,maximum height"\n'
)


class CSVFormatError(ValueError):
    """The payload could not be read as CSV at all."""


@dataclass
class ImportResult:
    success: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def message(self) -> str:
        if self.success == 0:
            return "No valid rows found. Please check your data."
        plural = "s" if self.success != 1 else ""
        return f"Successfully imported {self.success} question{plural}!"


def parse_csv(csv_data: str) -> pd.DataFrame:
    text = csv_data.strip()
    if not text:
        raise CSVFormatError("Please paste CSV data or upload a file")
    try:
        width = len(pd.read_csv(io.StringIO(text), nrows=0).columns)
        # rows wider than the header keep only the first `width` values
        df = pd.read_csv(
            io.StringIO(text),
            dtype=str,
            keep_default_na=False,
            skipinitialspace=True,
            engine="python",
            on_bad_lines=lambda fields: fields[:width],
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise CSVFormatError(f"Could not parse CSV: {exc}") from exc

    df.columns = [str(c).strip() for c in df.columns]
    # short rows leave NaN in the missing trailing columns
    return df.fillna("").apply(lambda col: col.astype(str).str.strip())


def validate_row(row: dict[str, Any]) -> list[str]:
    errors: list[str] = []

    if not row.get("subject"):
        errors.append("Subject is required")
    try:
        year = int(row.get("year", ""))
    except ValueError:
        errors.append("Valid year is required")
    else:
        if not YEAR_MIN <= year <= YEAR_MAX:
            errors.append(f"Year must be between {YEAR_MIN} and {YEAR_MAX}")
    if row.get("session") not in SESSIONS:
        errors.append('Session must be "May/June" or "Oct/Nov"')
    if not row.get("paper_number"):
        errors.append("Paper number is required")
    if not row.get("question_text"):
        errors.append("Question text is required")
    if not row.get("mark_scheme"):
        errors.append("Mark scheme is required")

    return errors


def run_import(csv_data: str) -> ImportResult:
    """Validate every row of *csv_data* and insert the valid ones."""
    df = parse_csv(csv_data)
    result = ImportResult()
    valid_rows: list[dict[str, Any]] = []

    for position, raw in enumerate(df.to_dict(orient="records")):
        row = {col: raw.get(col, "") for col in IMPORT_COLUMNS}
        row_errors = validate_row(row)
        if row_errors:
            result.errors.append(f"Line {position + 2}: {', '.join(row_errors)}")
            continue
        valid_rows.append({
            "subject": row["subject"],
            "year": int(row["year"]),
            "session": row["session"],
            "paper_number": row["paper_number"],
            "question_text": row["question_text"],
            "mark_scheme": row["mark_scheme"],
            "keywords": parse_keywords(row["keywords"]),
        })

    for row in valid_rows:
        add_question(row)
        result.success += 1

    if result.errors:
        logger.warning("Bulk import rejected %d row(s)", len(result.errors))
    logger.info("Bulk import inserted %d question(s)", result.success)
    return result
