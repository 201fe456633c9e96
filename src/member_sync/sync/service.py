"""
Member sync service - the entry points used by the API layer and scripts.

Loads (or creates) member aggregates, runs a sync cycle, recomputes the
projection and stores the result.
"""
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Union

from member_sync.ingestion.pictures import ProfilePictureFetcher
from member_sync.ingestion.propublica import list_congress_member_ids
from member_sync.models.member import Chamber, MemberAggregate, MemberRecord
from member_sync.sync.orchestrator import CycleReport, MemberSyncOrchestrator
from member_sync.sync.resolver import apply_resolution


class MemberSyncService:
    """
    Sync members and persist them.
    
    Usage:
        service = MemberSyncService(repository, orchestrator)
        member = await service.sync_member("S000622")
    """
    
    def __init__(self, repository, orchestrator: MemberSyncOrchestrator):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.repository = repository
        self.orchestrator = orchestrator
        self.reports: Dict[str, CycleReport] = {}
        self.reset_stats()
    
    def reset_stats(self):
        """Reset statistics counters"""
        self.stats = {
            "processed": 0,
            "inserted": 0,
            "updated": 0,
            "errors": 0,
            "started_at": None,
            "completed_at": None
        }
    
    async def _sync(
        self,
        aggregate: MemberAggregate,
        override: Optional[Union[dict, MemberRecord]] = None
    ) -> MemberAggregate:
        self.stats["processed"] += 1
        
        report = await self.orchestrator.run(aggregate, override)
        self.reports[aggregate.id] = report
        
        # The projection is recomputed on every cycle, whatever the sources did
        apply_resolution(aggregate)
        
        if await self.repository.upsert(aggregate):
            self.stats["inserted"] += 1
        else:
            self.stats["updated"] += 1
        return aggregate
    
    async def sync_member(
        self,
        member_id: str,
        override: Optional[Union[dict, MemberRecord]] = None
    ) -> MemberAggregate:
        """
        Run one full sync cycle for a member.
        
        Args:
            member_id: Bioguide id
            override: Optional user-curated values for this member
            
        Raises:
            OverrideRejected: if ``override`` carries a different id
        """
        aggregate = await self.repository.get(member_id) or MemberAggregate(id=member_id)
        return await self._sync(aggregate, override)
    
    async def sync_members(self, member_ids: Iterable[str]) -> List[MemberAggregate]:
        """
        Sync members one after another.
        
        The congress-legislators datasets are fetched once up front. A
        member whose cycle fails is logged and returned unchanged; the rest
        of the batch continues.
        """
        member_ids = list(member_ids)
        self.reset_stats()
        self.stats["started_at"] = datetime.now(timezone.utc)
        self.logger.info(f"Starting sync of {len(member_ids)} members...")
        
        existing = {a.id: a for a in await self.repository.get_many(member_ids)}
        await self.orchestrator.prewarm()
        
        results = []
        for member_id in member_ids:
            aggregate = existing.get(member_id) or MemberAggregate(id=member_id)
            try:
                results.append(await self._sync(aggregate))
            except Exception as e:
                self.stats["errors"] += 1
                self.logger.error(f"Cannot sync member {member_id}: {e}", exc_info=True)
                results.append(aggregate)
        
        self.stats["completed_at"] = datetime.now(timezone.utc)
        duration = self.stats["completed_at"] - self.stats["started_at"]
        self.logger.info(
            f"Sync complete. "
            f"Processed: {self.stats['processed']}, "
            f"Inserted: {self.stats['inserted']}, "
            f"Updated: {self.stats['updated']}, "
            f"Errors: {self.stats['errors']}, "
            f"Duration: {duration}"
        )
        return results
    
    async def sync_all_members(self) -> List[MemberAggregate]:
        """Sync every member known to the congress-legislators datasets."""
        orchestrator = self.orchestrator
        member_ids = await orchestrator.legislator_cache.list_member_ids(orchestrator.transport)
        return await self.sync_members(member_ids)
    
    async def sync_congress_members(self, chamber: Chamber, congress: int) -> List[MemberAggregate]:
        """Sync everyone who served in one chamber of a congress."""
        member_ids = await list_congress_member_ids(self.orchestrator.transport, chamber, congress)
        return await self.sync_members(member_ids)


def create_service(transport, repository, with_pictures: bool = True) -> MemberSyncService:
    """Wire a service with the default source steps."""
    picture_fetcher = ProfilePictureFetcher(transport) if with_pictures else None
    orchestrator = MemberSyncOrchestrator(transport, picture_fetcher=picture_fetcher)
    return MemberSyncService(repository, orchestrator)
