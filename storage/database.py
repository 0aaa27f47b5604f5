"""
MongoDB database utilities for async operations.
Handles connection, indexing and health checks for the Bookworm collections.
"""

from typing import Dict, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo.errors import ConnectionFailure

logger = structlog.get_logger(__name__)


class MongoDBManager:
    """
    Async MongoDB manager.
    Owns the client and exposes the users, reviews and reading-list collections.
    """

    def __init__(
        self,
        connection_url: str,
        database_name: str,
        users_collection: str = "users",
        reviews_collection: str = "reviews",
        reading_list_collection: str = "reading_list",
    ):
        """
        Initialize MongoDB manager.

        Args:
            connection_url: MongoDB connection URL
            database_name: Name of the database
            users_collection: Collection holding accounts
            reviews_collection: Collection holding book reviews
            reading_list_collection: Collection holding reading-list entries
        """
        self.connection_url = connection_url
        self.database_name = database_name
        self.collection_names = {
            "users": users_collection,
            "reviews": reviews_collection,
            "reading_list": reading_list_collection,
        }
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None

    async def connect(self) -> None:
        """Establish connection to MongoDB and create indexes."""
        try:
            self.client = AsyncIOMotorClient(self.connection_url, tz_aware=True)
            self.database = self.client[self.database_name]

            # Test connection
            await self.client.admin.command('ping')
            logger.info("Successfully connected to MongoDB", database=self.database_name)

            await self._create_indexes()

        except ConnectionFailure as e:
            logger.error("Failed to connect to MongoDB", error=str(e))
            raise

    async def disconnect(self) -> None:
        """Close MongoDB connection."""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")

    def collection(self, name: str) -> AsyncIOMotorCollection:
        """Return one of the managed collections by logical name."""
        if self.database is None:
            raise RuntimeError("MongoDBManager is not connected")
        return self.database[self.collection_names[name]]

    @property
    def users(self) -> AsyncIOMotorCollection:
        return self.collection("users")

    @property
    def reviews(self) -> AsyncIOMotorCollection:
        return self.collection("reviews")

    @property
    def reading_list(self) -> AsyncIOMotorCollection:
        return self.collection("reading_list")

    async def _create_indexes(self) -> None:
        """
        Create indexes for the query patterns the API uses.
        Unique indexes back the one-account-per-email and
        one-entry-per-book-per-user rules.
        """
        try:
            await self.users.create_index("email", unique=True)

            await self.reviews.create_index([("bookKey", 1), ("createdAt", -1)])

            await self.reading_list.create_index(
                [("userEmail", 1), ("bookKey", 1)], unique=True
            )
            await self.reading_list.create_index([("userEmail", 1), ("createdAt", -1)])

            logger.info("Successfully created MongoDB indexes")

        except Exception as e:
            logger.error("Failed to create indexes", error=str(e))
            raise

    async def clear_all(self) -> None:
        """Delete every document in the managed collections."""
        for name in self.collection_names:
            result = await self.collection(name).delete_many({})
            logger.info("Cleared collection", collection=name, deleted=result.deleted_count)

    async def health_check(self) -> Dict:
        """
        Perform database health check.

        Returns:
            Dictionary with health status
        """
        try:
            await self.database.command("ping")
            return {
                "status": "healthy",
                "users_count": await self.users.count_documents({}),
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e)
            }
