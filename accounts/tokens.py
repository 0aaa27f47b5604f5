"""
Signed, time-limited session tokens.

Tokens are HS256 JWTs carrying the account email. They are not stored
anywhere and cannot be revoked; a token stays valid until it expires.
"""

from datetime import datetime, timedelta
from typing import Optional

import jwt
import structlog

from accounts.models import utcnow
from utilities.exceptions import InvalidToken

logger = structlog.get_logger(__name__)


class TokenService:
    """Issues and verifies bearer tokens."""

    def __init__(self, secret: str, algorithm: str = "HS256", expire_days: int = 7):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.algorithm = algorithm
        self.expires_in = timedelta(days=expire_days)

    def issue(self, email: str, now: Optional[datetime] = None) -> str:
        """
        Create a signed token for an identity.

        Args:
            email: Identity claim to embed
            now: Issuance time (defaults to the current UTC time)

        Returns:
            Encoded token string
        """
        issued_at = now or utcnow()
        payload = {
            "email": email,
            "iat": issued_at,
            "exp": issued_at + self.expires_in,
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> str:
        """
        Check a token and recover its identity.

        Args:
            token: Encoded token string

        Returns:
            The email the token was issued for

        Raises:
            InvalidToken: Bad signature, malformed payload, or expired
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise InvalidToken("Token expired")
        except jwt.PyJWTError as e:
            logger.debug("Token rejected", reason=type(e).__name__)
            raise InvalidToken("Invalid token")

        email = payload.get("email")
        if not isinstance(email, str) or not email:
            raise InvalidToken("Token payload missing identity")
        return email
