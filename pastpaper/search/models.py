from __future__ import annotations

from pydantic import BaseModel, Field

from ..questions.models import QuestionOut


class SearchRequest(BaseModel):
    query: str = Field(..., max_length=5000, description="Pasted question text")
    subject: str = Field(default="all", description='Subject name, or "all"')


class SearchResultItem(BaseModel):
    question: QuestionOut
    similarity: float
    bookmarked: bool = False


class SearchResponse(BaseModel):
    query: str
    subject: str
    results: list[SearchResultItem]
    total_candidates: int
    searches_remaining: int | None = None


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=1)


class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=6)


class BookmarkRequest(BaseModel):
    question_id: str = Field(..., min_length=1)


class BookmarkOut(BaseModel):
    question: QuestionOut
    created_at: str


class SubscriptionUpdate(BaseModel):
    subscription_type: str = Field(..., pattern=r"^(free|premium)$")


class AdminEmailRequest(BaseModel):
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
