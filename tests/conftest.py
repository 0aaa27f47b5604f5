"""
Pytest configuration and shared fixtures.
"""

import asyncio
from typing import Dict, Optional
from unittest.mock import AsyncMock

import pytest

from accounts.authenticator import Authenticator
from accounts.models import Account
from accounts.tokens import TokenService
from api.database import APIDatabaseService
from utilities.config import BookwormConfig
from utilities.exceptions import DuplicateKey

TEST_SECRET = "test-secret-key"


class InMemoryCredentialStore:
    """
    Credential store double with the same contract as CredentialStore.

    Each call yields to the event loop like a real round trip, but the
    existence check and the insert in ``create`` happen without an await in
    between, so uniqueness holds under concurrent callers.
    """

    def __init__(self):
        self.accounts: Dict[str, Account] = {}
        self.create_calls = 0

    async def find_by_email(self, email: str) -> Optional[Account]:
        await asyncio.sleep(0)
        return self.accounts.get(email)

    async def create(self, email: str, password_hash: str) -> Account:
        self.create_calls += 1
        await asyncio.sleep(0)
        if email in self.accounts:
            raise DuplicateKey(f"Account already exists: {email}")
        account = Account(email=email, password_hash=password_hash)
        self.accounts[email] = account
        return account


@pytest.fixture
def settings():
    """Configuration with a real secret and the cheapest bcrypt cost."""
    return BookwormConfig(jwt_secret=TEST_SECRET, bcrypt_rounds=4, log_file=None)


@pytest.fixture
def credential_store():
    """Empty in-memory credential store."""
    return InMemoryCredentialStore()


@pytest.fixture
def token_service():
    """Token service signing with the test secret."""
    return TokenService(secret=TEST_SECRET, algorithm="HS256", expire_days=7)


@pytest.fixture
def authenticator(credential_store, token_service):
    """Authenticator wired to the in-memory store."""
    return Authenticator(
        store=credential_store,
        tokens=token_service,
        allowed_domain="gmail.com",
        bcrypt_rounds=4,
    )


@pytest.fixture
def mock_db_service():
    """Mock review and reading-list service."""
    return AsyncMock(spec=APIDatabaseService)
