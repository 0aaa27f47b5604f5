"""
Test data seeder for the Bookworm database.
Clears the users, reviews and reading-list collections and inserts sample data.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from accounts.models import utcnow
from accounts.passwords import hash_password_async
from accounts.store import CredentialStore
from storage.database import MongoDBManager
from utilities.config import config
from utilities.logger import setup_logging, get_logger

TEST_USERS = [
    {"email": "test1@gmail.com", "password": "test123"},
    {"email": "test2@gmail.com", "password": "test123"},
]

TEST_REVIEWS = [
    {
        "bookKey": "/works/OL45804W",
        "text": "Amazing book! Loved the characters.",
        "rating": 5,
        "userEmail": "test1@gmail.com",
    },
    {
        "bookKey": "/works/OL45804W",
        "text": "Great story and well written.",
        "rating": 4,
        "userEmail": "test2@gmail.com",
    },
]

TEST_READING_LIST = [
    {
        "userEmail": "test1@gmail.com",
        "bookKey": "/works/OL45804W",
        "title": "The Hobbit",
        "coverId": 12345,
        "authors": ["J.R.R. Tolkien"],
    },
]


async def seed_database(db_manager: MongoDBManager) -> None:
    """Replace the contents of the managed collections with the sample data."""
    logger = get_logger(__name__)

    await db_manager.clear_all()

    store = CredentialStore(db_manager.users)
    for user in TEST_USERS:
        password_hash = await hash_password_async(user["password"], config.bcrypt_rounds)
        await store.create(user["email"], password_hash)
    logger.info("Created test users", count=len(TEST_USERS))

    now = utcnow()
    await db_manager.reviews.insert_many([dict(review, createdAt=now) for review in TEST_REVIEWS])
    logger.info("Created test reviews", count=len(TEST_REVIEWS))

    await db_manager.reading_list.insert_many([dict(item, createdAt=now) for item in TEST_READING_LIST])
    logger.info("Created test reading list items", count=len(TEST_READING_LIST))


async def main():
    """Seed the configured database."""
    setup_logging(log_level=config.log_level, log_format="console")
    logger = get_logger(__name__)

    db_manager = MongoDBManager(
        connection_url=config.mongodb_url,
        database_name=config.mongodb_database,
        users_collection=config.users_collection,
        reviews_collection=config.reviews_collection,
        reading_list_collection=config.reading_list_collection,
    )

    try:
        await db_manager.connect()
        await seed_database(db_manager)
    except Exception as e:
        logger.error("Error seeding database", error=str(e))
        sys.exit(1)
    finally:
        await db_manager.disconnect()

    print("\nTest accounts:")
    for user in TEST_USERS:
        print(f"- Email: {user['email']} / Password: {user['password']}")
    print("\nDone! Database seeded successfully ✨")


if __name__ == "__main__":
    asyncio.run(main())
