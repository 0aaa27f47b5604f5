"""
Pydantic models for accounts and login results.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(timezone.utc)


class Account(BaseModel):
    """
    Stored identity record. One per email, created on first login.

    Documents use camelCase keys (``passwordHash``, ``createdAt``), the
    layout existing ``users`` collections already have.
    """
    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(..., description="Unique account email")
    password_hash: str = Field(..., alias="passwordHash", description="bcrypt hash of the password")
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt", description="When the account was created")

    def to_document(self) -> Dict[str, Any]:
        """MongoDB document for this account."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "Account":
        # Extra keys such as _id or __v are ignored
        return cls.model_validate(doc)


class LoginKind(str, Enum):
    """Which branch of the login-or-register flow ran."""
    REGISTERED = "registered"
    AUTHENTICATED = "authenticated"


class LoginOutcome(BaseModel):
    """
    Result of a successful login attempt.

    The HTTP layer collapses both kinds into the same ``{token, email}`` body;
    the kind is kept here so callers and tests can tell a first-time
    registration from a returning login.
    """
    kind: LoginKind
    account: Account
    token: str

    @property
    def email(self) -> str:
        return self.account.email

    @property
    def registered(self) -> bool:
        return self.kind == LoginKind.REGISTERED
