"""Database module - normalization, connection management and repositories."""

from member_sync.database.connection import (
    get_sync_client,
    close_sync_client,
    get_async_client,
    close_async_client,
    get_members_collection,
    get_members_collection_sync,
    create_member_indexes,
    ping,
)
from member_sync.database.repository import (
    MemberRepository,
    InMemoryMemberRepository,
)

__all__ = [
    "get_sync_client",
    "close_sync_client",
    "get_async_client",
    "close_async_client",
    "get_members_collection",
    "get_members_collection_sync",
    "create_member_indexes",
    "ping",
    "MemberRepository",
    "InMemoryMemberRepository",
]
