"""
Database service layer for reviews and reading lists.
"""

from typing import Any, Dict, List, Optional

import structlog
from motor.motor_asyncio import AsyncIOMotorCollection
from pymongo.errors import DuplicateKeyError, PyMongoError

from accounts.models import utcnow
from api.models import ReadingListCreate, ReadingListItemResponse, ReviewResponse
from utilities.exceptions import Conflict, UpstreamError

logger = structlog.get_logger(__name__)

MAX_REVIEWS = 50


def _to_response_fields(doc: Dict[str, Any]) -> Dict[str, Any]:
    """Replace MongoDB's ObjectId with a string id."""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


class APIDatabaseService:
    """Database service for review and reading-list operations."""

    def __init__(
        self,
        reviews_collection: AsyncIOMotorCollection,
        reading_list_collection: AsyncIOMotorCollection,
    ):
        self.reviews_collection = reviews_collection
        self.reading_list_collection = reading_list_collection

    async def get_reviews(self, book_key: str, limit: int = MAX_REVIEWS) -> List[ReviewResponse]:
        """
        Get the most recent reviews of a book.

        Args:
            book_key: Open Library work key
            limit: Maximum number of reviews to return

        Returns:
            Reviews, newest first
        """
        try:
            cursor = self.reviews_collection.find({"bookKey": book_key}).sort("createdAt", -1).limit(limit)
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error("Failed to fetch reviews", book_key=book_key, error=str(e))
            raise UpstreamError("Failed to fetch reviews", detail=str(e))

        return [ReviewResponse(**_to_response_fields(doc)) for doc in docs]

    async def create_review(
        self,
        book_key: str,
        user_email: str,
        text: str,
        rating: Optional[int] = None
    ) -> ReviewResponse:
        """
        Store a review written by an authenticated user.

        Args:
            book_key: Open Library work key
            user_email: Verified identity of the author
            text: Review text
            rating: Optional rating (1-5)

        Returns:
            The stored review
        """
        doc = {
            "bookKey": book_key,
            "userEmail": user_email,
            "rating": rating,
            "text": text,
            "createdAt": utcnow(),
        }
        try:
            result = await self.reviews_collection.insert_one(doc)
        except PyMongoError as e:
            logger.error("Failed to save review", book_key=book_key, user_email=user_email, error=str(e))
            raise UpstreamError("Failed to save review", detail=str(e))

        doc["_id"] = result.inserted_id
        logger.info("Review saved", book_key=book_key, user_email=user_email)
        return ReviewResponse(**_to_response_fields(doc))

    async def get_reading_list(self, user_email: str) -> List[ReadingListItemResponse]:
        """Get a user's reading list, most recently added first."""
        try:
            cursor = self.reading_list_collection.find({"userEmail": user_email}).sort("createdAt", -1)
            docs = await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error("Failed to fetch reading list", user_email=user_email, error=str(e))
            raise UpstreamError("Failed to fetch reading list", detail=str(e))

        return [ReadingListItemResponse(**_to_response_fields(doc)) for doc in docs]

    async def add_to_reading_list(
        self,
        user_email: str,
        item: ReadingListCreate
    ) -> ReadingListItemResponse:
        """
        Add a book to a user's reading list.

        Args:
            user_email: Verified identity of the owner
            item: Book details; ``book_key`` must be set

        Returns:
            The stored entry

        Raises:
            Conflict: If the book is already on the list
        """
        doc = {
            "userEmail": user_email,
            "bookKey": item.book_key,
            "title": item.title,
            "coverId": item.cover_id,
            "authors": item.authors,
            "createdAt": utcnow(),
        }
        try:
            existing = await self.reading_list_collection.find_one(
                {"userEmail": user_email, "bookKey": item.book_key}
            )
            if existing:
                raise Conflict("Already in reading list")

            # The unique (userEmail, bookKey) index catches concurrent inserts
            result = await self.reading_list_collection.insert_one(doc)
        except DuplicateKeyError:
            raise Conflict("Already in reading list")
        except PyMongoError as e:
            logger.error("Failed to add to reading list", user_email=user_email, error=str(e))
            raise UpstreamError("Failed to add to reading list", detail=str(e))

        doc["_id"] = result.inserted_id
        logger.info("Added to reading list", user_email=user_email, book_key=item.book_key)
        return ReadingListItemResponse(**_to_response_fields(doc))

    async def remove_from_reading_list(self, user_email: str, book_key: str) -> bool:
        """
        Remove a book from a user's reading list.

        Returns:
            True if an entry was deleted, False if none matched
        """
        try:
            result = await self.reading_list_collection.delete_one(
                {"userEmail": user_email, "bookKey": book_key}
            )
        except PyMongoError as e:
            logger.error("Failed to remove from reading list", user_email=user_email, error=str(e))
            raise UpstreamError("Failed to remove from reading list", detail=str(e))

        return result.deleted_count > 0
