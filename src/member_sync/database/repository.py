"""
Member aggregate persistence.

Aggregates are stored one document per member, keyed by bioguide id
(``_id``). There is no transactional guarantee: a read-then-write race
between two writers is tolerated, last write wins.
"""
import logging
from typing import Dict, Iterable, List, Optional

from motor.motor_asyncio import AsyncIOMotorCollection

from member_sync.database.connection import get_members_collection
from member_sync.models.member import MemberAggregate

logger = logging.getLogger(__name__)


def to_document(aggregate: MemberAggregate) -> dict:
    """Convert an aggregate to its stored document."""
    doc = aggregate.model_dump(mode="json")
    doc["_id"] = doc.pop("id")
    return doc


def from_document(doc: dict) -> MemberAggregate:
    """Rebuild an aggregate from a stored document."""
    data = dict(doc)
    data["id"] = data.pop("_id")
    return MemberAggregate.model_validate(data)


class MemberRepository:
    """
    Keyed get/put for member aggregates backed by MongoDB (motor).
    
    Usage:
        repo = MemberRepository()
        aggregate = await repo.get("S000622")
    """
    
    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None):
        if collection is None:
            collection = get_members_collection()
        self.collection = collection
    
    async def get(self, member_id: str) -> Optional[MemberAggregate]:
        doc = await self.collection.find_one({"_id": member_id})
        return from_document(doc) if doc else None
    
    async def get_many(self, member_ids: Iterable[str]) -> List[MemberAggregate]:
        cursor = self.collection.find({"_id": {"$in": list(member_ids)}})
        return [from_document(doc) async for doc in cursor]
    
    async def upsert(self, aggregate: MemberAggregate) -> bool:
        """
        Create or replace the stored aggregate.
        
        Returns:
            True if this was a new insert, False if update
        """
        result = await self.collection.replace_one(
            {"_id": aggregate.id},
            to_document(aggregate),
            upsert=True
        )
        return result.upserted_id is not None


class InMemoryMemberRepository:
    """
    Same interface as MemberRepository, held in a dict.
    
    Stores documents rather than model instances so callers never share
    mutable state with the store.
    """
    
    def __init__(self):
        self.documents: Dict[str, dict] = {}
    
    async def get(self, member_id: str) -> Optional[MemberAggregate]:
        doc = self.documents.get(member_id)
        return from_document(doc) if doc else None
    
    async def get_many(self, member_ids: Iterable[str]) -> List[MemberAggregate]:
        return [
            from_document(self.documents[member_id])
            for member_id in member_ids
            if member_id in self.documents
        ]
    
    async def upsert(self, aggregate: MemberAggregate) -> bool:
        is_new = aggregate.id not in self.documents
        self.documents[aggregate.id] = to_document(aggregate)
        return is_new
