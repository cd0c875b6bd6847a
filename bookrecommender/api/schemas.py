"""Pydantic request/response schemas."""

from datetime import date, datetime, timezone

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bookrecommender.domain.models import ReadingStatus

# ── Auth ───────────────────────────────────────────


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class AuthResponse(BaseModel):
    id: int
    email: str
    token: str
    expires: datetime


class UserInfo(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    created_at: datetime


# ── Books ──────────────────────────────────────────


class BookFields(BaseModel):
    isbn: str | None = Field(default=None, max_length=20)
    description: str | None = Field(default=None, max_length=2000)
    publication_date: date | None = None
    genre: str | None = Field(default=None, max_length=100)
    page_count: int | None = Field(default=None, gt=0)
    cover_image_url: str | None = Field(default=None, max_length=500)


class CreateBookRequest(BookFields):
    title: str = Field(min_length=1, max_length=255)
    author: str = Field(min_length=1, max_length=255)

    @field_validator("title", "author")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class UpdateBookRequest(BookFields):
    """Partial update: only fields present in the request body are applied."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    author: str | None = Field(default=None, min_length=1, max_length=255)

    @field_validator("title", "author")
    @classmethod
    def not_blank(cls, value: str | None) -> str:
        if value is None or not value.strip():
            raise ValueError("must not be blank")
        return value.strip()


class BookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author: str
    isbn: str | None
    description: str | None
    publication_date: date | None
    genre: str | None
    page_count: int | None
    cover_image_url: str | None
    created_at: datetime
    created_by_user_id: int | None
    created_by_user_email: str | None


# ── Library ────────────────────────────────────────


class AddBookToUserRequest(BaseModel):
    book_id: int
    reading_status: ReadingStatus = ReadingStatus.TO_READ


class UpdateUserBookRequest(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    reading_status: ReadingStatus | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    review: str | None = Field(default=None, max_length=2000)
    date_started: datetime | None = None
    date_finished: datetime | None = None

    @field_validator("reading_status")
    @classmethod
    def status_not_null(cls, value: ReadingStatus | None) -> ReadingStatus:
        if value is None:
            raise ValueError("reading_status cannot be null")
        return value

    @field_validator("date_started", "date_finished")
    @classmethod
    def to_naive_utc(cls, value: datetime | None) -> datetime | None:
        # columns are timezone-naive UTC
        if value is not None and value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class UserBookResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    book: BookResponse
    reading_status: ReadingStatus
    rating: int | None
    review: str | None
    date_started: datetime | None
    date_finished: datetime | None
    added_at: datetime
    updated_at: datetime


# ── Recommendations ────────────────────────────────


class AIRecommendation(BaseModel):
    """One item of the JSON array returned by the LLM."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    reason: str = ""


class RecommendationResponse(BaseModel):
    id: int
    book_id: int
    title: str
    author: str
    reason: str
    created_at: datetime
