"""
Bearer-token access guard for the FastAPI API.
"""

from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from accounts.authenticator import Authenticator
from accounts.tokens import TokenService
from utilities.exceptions import InvalidToken, Unauthorized

logger = structlog.get_logger(__name__)

# auto_error is off so a missing header is reported as 401 rather than 403
security = HTTPBearer(auto_error=False)


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_authenticator(request: Request) -> Authenticator:
    return request.app.state.authenticator


async def require_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Admit the request only if it carries a valid bearer token.

    The verified email is attached to ``request.state.identity`` and returned
    so handlers can depend on it directly.

    Raises:
        Unauthorized: Header missing, or token invalid or expired
    """
    if credentials is None or not credentials.credentials.strip():
        raise Unauthorized("No token")

    try:
        identity = tokens.verify(credentials.credentials.strip())
    except InvalidToken as e:
        logger.warning("Rejected bearer token", reason=e.message, path=request.url.path)
        raise Unauthorized("Invalid token")

    request.state.identity = identity
    return identity
