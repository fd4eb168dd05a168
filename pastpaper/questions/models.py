from __future__ import annotations

from pydantic import BaseModel, Field

CAMBRIDGE_SUBJECTS: list[str] = [
    "Mathematics",
    "Physics",
    "Chemistry",
    "Biology",
    "Economics",
    "Business Studies",
    "Computer Science",
    "English Literature",
    "History",
    "Geography",
    "Psychology",
    "Sociology",
]

SESSIONS: list[str] = ["May/June", "Oct/Nov"]

SESSION_PATTERN = r"^(May/June|Oct/Nov)$"

YEAR_MIN = 1900
YEAR_MAX = 2100


class QuestionOut(BaseModel):
    id: str
    subject: str
    year: int
    session: str
    paper_number: str
    question_text: str
    mark_scheme: str
    keywords: list[str]
    created_at: str


class QuestionCreate(BaseModel):
    subject: str = Field(..., min_length=1)
    year: int = Field(..., ge=YEAR_MIN, le=YEAR_MAX)
    session: str = Field(default="May/June", pattern=SESSION_PATTERN)
    paper_number: str = Field(..., min_length=1)
    question_text: str = Field(..., min_length=1)
    mark_scheme: str = Field(..., min_length=1)
    keywords: list[str] = Field(default_factory=list)


class QuestionUpdate(BaseModel):
    subject: str | None = Field(default=None, min_length=1)
    year: int | None = Field(default=None, ge=YEAR_MIN, le=YEAR_MAX)
    session: str | None = Field(default=None, pattern=SESSION_PATTERN)
    paper_number: str | None = Field(default=None, min_length=1)
    question_text: str | None = Field(default=None, min_length=1)
    mark_scheme: str | None = Field(default=None, min_length=1)
    keywords: list[str] | None = None


class QuestionListResponse(BaseModel):
    questions: list[QuestionOut]
    total: int
    showing: int


class BulkImportRequest(BaseModel):
    csv_data: str


class BulkImportResponse(BaseModel):
    success: int
    errors: list[str]
    message: str
