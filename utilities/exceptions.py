"""Custom exceptions for the Bookworm backend"""

from typing import Optional


class BookwormError(Exception):
    """Base exception for Bookworm. Carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class BadRequest(BookwormError):
    """Malformed, missing or policy-violating input"""
    status_code = 400


class InvalidCredentials(BookwormError):
    """Password does not match the stored hash"""
    status_code = 401


class Unauthorized(BookwormError):
    """Missing, invalid or expired bearer token"""
    status_code = 401


class NotFound(BookwormError):
    """Requested resource does not exist"""
    status_code = 404


class Conflict(BookwormError):
    """Resource already exists"""
    status_code = 409


class UpstreamError(BookwormError):
    """Unexpected failure in a downstream dependency (storage, search API)"""
    status_code = 500


class InvalidToken(BookwormError):
    """Token signature, payload or expiry check failed"""
    status_code = 401


class DuplicateKey(BookwormError):
    """Unique constraint violated in the store"""
    status_code = 409
