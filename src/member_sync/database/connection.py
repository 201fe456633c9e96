"""
MongoDB clients and the members collection.

The repository runs on motor; the connectivity check and index setup run
on a plain pymongo client, since they are one-shot script operations.

Usage:
    from member_sync.database.connection import get_members_collection, ping

    ping()                                   # raises if MongoDB is unreachable
    collection = get_members_collection()    # motor collection
"""
import logging
from typing import List

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo import ASCENDING, MongoClient
from pymongo.collection import Collection

from member_sync.config.settings import settings

logger = logging.getLogger(__name__)

_sync_client: MongoClient | None = None
_async_client: AsyncIOMotorClient | None = None


def get_sync_client() -> MongoClient:
    global _sync_client
    if _sync_client is None:
        _sync_client = MongoClient(settings.MONGODB_URI)
    return _sync_client


def close_sync_client() -> None:
    global _sync_client
    if _sync_client is not None:
        _sync_client.close()
        _sync_client = None


def get_async_client() -> AsyncIOMotorClient:
    global _async_client
    if _async_client is None:
        _async_client = AsyncIOMotorClient(settings.MONGODB_URI)
    return _async_client


async def close_async_client() -> None:
    global _async_client
    if _async_client is not None:
        _async_client.close()
        _async_client = None


def get_members_collection() -> AsyncIOMotorCollection:
    """The members collection on the shared motor client."""
    return get_async_client()[settings.MONGODB_DATABASE][settings.MEMBERS_COLLECTION]


def get_members_collection_sync() -> Collection:
    return get_sync_client()[settings.MONGODB_DATABASE][settings.MEMBERS_COLLECTION]


def ping() -> bool:
    """
    Check that MongoDB answers.

    Returns:
        True when the server acknowledges the ping; connection errors propagate
    """
    result = get_sync_client().admin.command("ping")
    return result.get("ok") == 1.0


def create_member_indexes() -> List[str]:
    """
    Create the lookup indexes on the members collection.

    Members are keyed by bioguide id (``_id``); these cover lookups by
    name and by the congresses and states a member served.

    Returns:
        Names of the indexes created (or already present)
    """
    collection = get_members_collection_sync()

    logger.info(f"Creating indexes on {settings.MEMBERS_COLLECTION}...")
    names = [
        collection.create_index(
            [("projection.last_name", ASCENDING), ("projection.first_name", ASCENDING)],
            name="idx_projection_name"
        ),
        collection.create_index(
            [("projection.congress_roles.congress_numbers", ASCENDING)],
            name="idx_projection_congress"
        ),
        collection.create_index(
            [
                ("projection.congress_roles.state", ASCENDING),
                ("projection.congress_roles.chamber", ASCENDING)
            ],
            name="idx_projection_state_chamber"
        ),
    ]
    logger.info(f"✅ {settings.MEMBERS_COLLECTION} indexes: {', '.join(names)}")
    return names
