"""
MongoDB-backed credential store.
Owns the account records and enforces one account per email.
"""

from typing import Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from accounts.models import Account
from utilities.exceptions import DuplicateKey, UpstreamError

logger = structlog.get_logger(__name__)


class CredentialStore:
    """
    Account persistence on top of a motor collection.

    Uniqueness of ``email`` is enforced by the unique index created in
    ``MongoDBManager``, so two concurrent ``create`` calls for the same
    email cannot both succeed.
    """

    def __init__(self, collection: AsyncIOMotorCollection):
        self.collection = collection

    async def find_by_email(self, email: str) -> Optional[Account]:
        """
        Look up an account.

        Args:
            email: Normalized account email

        Returns:
            Account if found, None otherwise
        """
        try:
            doc = await self.collection.find_one({"email": email})
        except PyMongoError as e:
            logger.error("Failed to look up account", email=email, error=str(e))
            raise UpstreamError("Operation failed", detail=str(e))

        if doc is None:
            return None
        return Account.from_document(doc)

    async def create(self, email: str, password_hash: str) -> Account:
        """
        Insert a new account.

        Args:
            email: Normalized account email
            password_hash: bcrypt hash of the password

        Returns:
            The stored Account

        Raises:
            DuplicateKey: If an account with this email already exists
        """
        account = Account(email=email, password_hash=password_hash)
        try:
            await self.collection.insert_one(account.to_document())
        except DuplicateKeyError:
            logger.info("Account already exists", email=email)
            raise DuplicateKey(f"Account already exists: {email}")
        except PyMongoError as e:
            logger.error("Failed to create account", email=email, error=str(e))
            raise UpstreamError("Operation failed", detail=str(e))

        logger.info("Created new account", email=email)
        return account
