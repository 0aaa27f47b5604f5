"""
Combined login-or-register flow.

There is a single entry point for both signing up and signing in: an unseen
email is registered with the supplied password, a known email has its
password checked. Either way the caller gets a session token back.
"""

from typing import Optional

import structlog

from accounts.models import Account, LoginKind, LoginOutcome
from accounts.passwords import hash_password_async, password_too_long, verify_password_async
from accounts.store import CredentialStore
from accounts.tokens import TokenService
from utilities.exceptions import BadRequest, DuplicateKey, InvalidCredentials, UpstreamError

logger = structlog.get_logger(__name__)


class Authenticator:
    """Decides between registering and authenticating, then issues a token."""

    def __init__(
        self,
        store: CredentialStore,
        tokens: TokenService,
        allowed_domain: str = "gmail.com",
        bcrypt_rounds: int = 10,
    ):
        self.store = store
        self.tokens = tokens
        self.allowed_domain = allowed_domain.lower().lstrip("@")
        self.bcrypt_rounds = bcrypt_rounds

    def normalize_email(self, email: Optional[str], password: Optional[str]) -> str:
        """
        Validate request shape and the accepted-domain policy.

        Returns:
            Trimmed, lower-cased email

        Raises:
            BadRequest: Missing fields, wrong domain, or over-long password
        """
        if not isinstance(email, str) or not isinstance(password, str):
            raise BadRequest("Missing email or password")

        email = email.strip().lower()
        if not email or not password:
            raise BadRequest("Missing email or password")

        if not email.endswith("@" + self.allowed_domain) or email.startswith("@"):
            raise BadRequest(f"Only @{self.allowed_domain} accounts are allowed")

        if password_too_long(password):
            raise BadRequest("Password is too long")

        return email

    async def login(self, email: Optional[str], password: Optional[str]) -> LoginOutcome:
        """
        Log in, creating the account first if the email is unseen.

        Args:
            email: Email as supplied by the client
            password: Plaintext password

        Returns:
            LoginOutcome with the branch taken and a fresh token

        Raises:
            BadRequest: Invalid input
            InvalidCredentials: Known email, wrong password
        """
        email = self.normalize_email(email, password)

        account = await self.store.find_by_email(email)
        kind = LoginKind.AUTHENTICATED

        if account is None:
            account = await self._register(email, password)
            if account is not None:
                kind = LoginKind.REGISTERED
            else:
                # Lost a race with a concurrent first login for this email
                account = await self.store.find_by_email(email)
                if account is None:
                    raise UpstreamError("Operation failed")

        if kind == LoginKind.AUTHENTICATED:
            await self._check_password(account, password)

        token = self.tokens.issue(account.email)
        logger.info("Login succeeded", email=account.email, kind=kind.value)
        return LoginOutcome(kind=kind, account=account, token=token)

    async def _register(self, email: str, password: str) -> Optional[Account]:
        """Create the account; None if another request created it first."""
        password_hash = await hash_password_async(password, self.bcrypt_rounds)
        try:
            return await self.store.create(email, password_hash)
        except DuplicateKey:
            logger.info("Concurrent registration detected", email=email)
            return None

    async def _check_password(self, account: Account, password: str) -> None:
        if not await verify_password_async(password, account.password_hash):
            logger.warning("Incorrect password", email=account.email)
            raise InvalidCredentials("Incorrect password")
