"""
Tests for the MongoDB connection manager.
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from pymongo.errors import ConnectionFailure

from storage.database import MongoDBManager


@pytest.fixture
def mock_client():
    """Mock motor client with dict-style database access."""
    client = MagicMock()
    client.admin.command = AsyncMock(return_value={"ok": 1})
    database = MagicMock()
    collections = {}

    def get_collection(name):
        if name not in collections:
            collection = MagicMock()
            collection.create_index = AsyncMock()
            collection.delete_many = AsyncMock(return_value=MagicMock(deleted_count=3))
            collection.count_documents = AsyncMock(return_value=2)
            collections[name] = collection
        return collections[name]

    database.__getitem__.side_effect = get_collection
    database.command = AsyncMock(return_value={"ok": 1})
    client.__getitem__.return_value = database
    client.collections = collections
    return client


@pytest.fixture
def manager():
    return MongoDBManager("mongodb://localhost:27017", "bookworm_test")


class TestMongoDBManager:
    """Test cases for MongoDBManager."""

    @pytest.mark.asyncio
    async def test_connect_creates_unique_indexes(self, manager, mock_client):
        with patch("storage.database.AsyncIOMotorClient", return_value=mock_client) as client_cls:
            await manager.connect()

        client_cls.assert_called_once_with("mongodb://localhost:27017", tz_aware=True)
        mock_client.admin.command.assert_awaited_once_with("ping")
        mock_client.collections["users"].create_index.assert_any_await("email", unique=True)
        mock_client.collections["reading_list"].create_index.assert_any_await(
            [("userEmail", 1), ("bookKey", 1)], unique=True
        )

    @pytest.mark.asyncio
    async def test_connect_failure_propagates(self, manager, mock_client):
        mock_client.admin.command.side_effect = ConnectionFailure("down")
        with patch("storage.database.AsyncIOMotorClient", return_value=mock_client):
            with pytest.raises(ConnectionFailure):
                await manager.connect()

    def test_collections_require_connection(self, manager):
        with pytest.raises(RuntimeError):
            manager.users

    @pytest.mark.asyncio
    async def test_health_check(self, manager, mock_client):
        with patch("storage.database.AsyncIOMotorClient", return_value=mock_client):
            await manager.connect()
        health = await manager.health_check()
        assert health == {"status": "healthy", "users_count": 2}

        mock_client.__getitem__.return_value.command.side_effect = ConnectionFailure("down")
        health = await manager.health_check()
        assert health["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_clear_all_and_disconnect(self, manager, mock_client):
        with patch("storage.database.AsyncIOMotorClient", return_value=mock_client):
            await manager.connect()
        await manager.clear_all()
        for name in ("users", "reviews", "reading_list"):
            mock_client.collections[name].delete_many.assert_awaited_once_with({})

        await manager.disconnect()
        mock_client.close.assert_called_once()
        assert manager.client is None
