import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from core.config import settings

logger = logging.getLogger(__name__)


def create_client(url: str | None = None) -> AsyncIOMotorClient:
    return AsyncIOMotorClient(url or settings.MONGODB_URL)


def get_database(client: AsyncIOMotorClient, name: str | None = None) -> AsyncIOMotorDatabase:
    return client[name or settings.MONGODB_DB]


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """Indexes backing the list filters and the unique account e-mail."""
    await db["bookings"].create_index([("user_id", 1), ("created_at", -1)])
    await db["bookings"].create_index("status")
    await db["users"].create_index("email", unique=True)
    await db["tour_packages"].create_index("trip_category_id")
    await db["destinations"].create_index("trip_category_id")
    logger.info("Database indexes ensured")
