"""
API models and schemas for the FastAPI application.

Field names on the wire are camelCase (``bookKey``, ``createdAt``) to match
the frontend; Python attributes stay snake_case through aliases.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def normalize_book_key(book_key: str) -> str:
    """
    Canonical Open Library work key, always with a leading slash.

    Route parameters lose the slash (``/api/reviews/works/OL45804W`` gives
    ``works/OL45804W``) while bodies and stored documents keep it.
    """
    return "/" + book_key.lstrip("/")


class CamelModel(BaseModel):
    """Base model accepting either the field name or its camelCase alias."""
    model_config = ConfigDict(populate_by_name=True)


class LoginRequest(BaseModel):
    """Credentials for the combined login-or-register endpoint."""
    # Optional so that a missing field is reported as 400 by the authenticator
    email: Optional[str] = Field(None, description="Account email")
    password: Optional[str] = Field(None, description="Plaintext password")


class LoginResponse(BaseModel):
    """Successful login or registration."""
    token: str = Field(..., description="Bearer token valid for 7 days")
    email: str = Field(..., description="Authenticated account email")


class AccountResponse(CamelModel):
    """Account profile. The password hash is never included."""
    email: str = Field(..., description="Account email")
    created_at: datetime = Field(..., alias="createdAt", description="When the account was created")


class ReviewCreate(BaseModel):
    """Body for posting a review."""
    rating: Optional[int] = Field(None, ge=1, le=5, description="Rating (1-5)")
    text: Optional[str] = Field(None, description="Review text")


class ReviewResponse(CamelModel):
    """Stored review."""
    id: str = Field(..., description="Review identifier")
    book_key: str = Field(..., alias="bookKey", description="Open Library work key")
    user_email: str = Field(..., alias="userEmail", description="Author of the review")
    rating: Optional[int] = Field(None, description="Rating (1-5)")
    text: str = Field(..., description="Review text")
    created_at: datetime = Field(..., alias="createdAt", description="When the review was posted")


class ReadingListCreate(CamelModel):
    """Body for adding a book to the reading list."""
    book_key: Optional[str] = Field(None, alias="bookKey", description="Open Library work key")
    title: Optional[str] = Field(None, description="Book title")
    cover_id: Optional[int] = Field(None, alias="coverId", description="Open Library cover id")
    authors: List[str] = Field(default_factory=list, description="Author names")

    @field_validator("book_key")
    @classmethod
    def _normalize_book_key(cls, v: Optional[str]) -> Optional[str]:
        if not v or not v.strip():
            return v
        return normalize_book_key(v.strip())


class ReadingListItemResponse(CamelModel):
    """Reading-list entry."""
    id: str = Field(..., description="Entry identifier")
    user_email: str = Field(..., alias="userEmail", description="Owner of the entry")
    book_key: str = Field(..., alias="bookKey", description="Open Library work key")
    title: Optional[str] = Field(None, description="Book title")
    cover_id: Optional[int] = Field(None, alias="coverId", description="Open Library cover id")
    authors: List[str] = Field(default_factory=list, description="Author names")
    created_at: datetime = Field(..., alias="createdAt", description="When the entry was added")


class SuccessResponse(BaseModel):
    """Generic acknowledgement."""
    success: bool = True


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
    status_code: int = Field(..., description="HTTP status code")


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(..., description="Current timestamp")
    version: str = Field(..., description="API version")
    database_status: str = Field(..., description="Database connection status")
