"""
Tests for the review and reading-list database service.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import AutoReconnect, DuplicateKeyError

from api.database import APIDatabaseService
from api.models import ReadingListCreate
from utilities.exceptions import Conflict, UpstreamError

CREATED = datetime(2025, 9, 21, 10, 0, tzinfo=timezone.utc)


def make_collection(docs=None):
    """Mock motor collection whose find() cursor yields ``docs``."""
    collection = MagicMock()
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs or [])
    collection.find.return_value = cursor
    collection.find_one = AsyncMock(return_value=None)
    collection.insert_one = AsyncMock(return_value=MagicMock(inserted_id=ObjectId()))
    collection.delete_one = AsyncMock(return_value=MagicMock(deleted_count=1))
    return collection


@pytest.fixture
def reviews():
    return make_collection()


@pytest.fixture
def reading_list():
    return make_collection()


@pytest.fixture
def service(reviews, reading_list):
    return APIDatabaseService(reviews, reading_list)


class TestReviews:
    """Review operations."""

    @pytest.mark.asyncio
    async def test_get_reviews_newest_first(self, service, reviews):
        """Reviews are queried by book, newest first, capped at 50."""
        oid = ObjectId()
        reviews.find.return_value.to_list.return_value = [{
            "_id": oid, "bookKey": "/works/OL1W", "userEmail": "a@gmail.com",
            "rating": 4, "text": "Good", "createdAt": CREATED,
        }]

        result = await service.get_reviews("/works/OL1W")

        reviews.find.assert_called_once_with({"bookKey": "/works/OL1W"})
        reviews.find.return_value.sort.assert_called_once_with("createdAt", -1)
        reviews.find.return_value.limit.assert_called_once_with(50)
        assert result[0].id == str(oid)
        assert result[0].text == "Good"

    @pytest.mark.asyncio
    async def test_create_review(self, service, reviews):
        """The stored document carries the author and a timestamp."""
        review = await service.create_review("/works/OL1W", "a@gmail.com", "Loved it", 5)

        doc = reviews.insert_one.await_args.args[0]
        assert doc["userEmail"] == "a@gmail.com"
        assert doc["rating"] == 5
        assert doc["createdAt"] is not None
        assert review.user_email == "a@gmail.com"
        assert review.id == str(reviews.insert_one.return_value.inserted_id)

    @pytest.mark.asyncio
    async def test_create_review_storage_failure(self, service, reviews):
        reviews.insert_one.side_effect = AutoReconnect("connection lost")
        with pytest.raises(UpstreamError) as exc_info:
            await service.create_review("/works/OL1W", "a@gmail.com", "Loved it")
        assert exc_info.value.message == "Failed to save review"


class TestReadingList:
    """Reading-list operations."""

    @pytest.mark.asyncio
    async def test_add_item(self, service, reading_list):
        item = await service.add_to_reading_list(
            "a@gmail.com",
            ReadingListCreate(bookKey="/works/OL45804W", title="The Hobbit", coverId=1, authors=["Tolkien"])
        )

        reading_list.find_one.assert_awaited_once_with({"userEmail": "a@gmail.com", "bookKey": "/works/OL45804W"})
        assert item.book_key == "/works/OL45804W"
        assert item.authors == ["Tolkien"]

    @pytest.mark.asyncio
    async def test_add_existing_item_conflicts(self, service, reading_list):
        """An existing entry is reported without inserting."""
        reading_list.find_one.return_value = {"_id": ObjectId()}

        with pytest.raises(Conflict):
            await service.add_to_reading_list("a@gmail.com", ReadingListCreate(bookKey="/works/OL1W"))
        reading_list.insert_one.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_concurrent_insert_conflicts(self, service, reading_list):
        """A unique index violation from a concurrent insert is also a conflict."""
        reading_list.insert_one.side_effect = DuplicateKeyError("E11000 duplicate key error")

        with pytest.raises(Conflict):
            await service.add_to_reading_list("a@gmail.com", ReadingListCreate(bookKey="/works/OL1W"))

    @pytest.mark.asyncio
    async def test_get_reading_list_scoped_to_user(self, service, reading_list):
        await service.get_reading_list("a@gmail.com")
        reading_list.find.assert_called_once_with({"userEmail": "a@gmail.com"})
        reading_list.find.return_value.sort.assert_called_once_with("createdAt", -1)

    @pytest.mark.asyncio
    async def test_remove_item(self, service, reading_list):
        assert await service.remove_from_reading_list("a@gmail.com", "/works/OL1W") is True
        reading_list.delete_one.assert_awaited_once_with({"userEmail": "a@gmail.com", "bookKey": "/works/OL1W"})

        reading_list.delete_one.return_value = MagicMock(deleted_count=0)
        assert await service.remove_from_reading_list("a@gmail.com", "/works/OL1W") is False
