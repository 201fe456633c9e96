"""
Sync orchestrator.

Runs one sync cycle for one member: the user override first, then each
upstream source in a fixed order, one after the other. A source whose
fetch fails has its failure counted and the cycle moves on; a source that
has failed three times without ever succeeding is presumed to have no data
for the member and is skipped without a request.

The profile picture download runs alongside the source chain; it only
touches the picture fields of the aggregate.

Callers must not run two cycles for the same member concurrently: the
aggregate is updated in place.
"""
import asyncio
import logging
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, List, NamedTuple, Optional, Tuple, Union

from member_sync.clock import Clock, now_millis
from member_sync.config.settings import settings
from member_sync.errors import OverrideRejected, UpstreamUnavailable
from member_sync.ingestion.bioguide import fetch_bioguide, normalize_bioguide
from member_sync.ingestion.propublica import fetch_propublica, normalize_propublica
from member_sync.ingestion.unitedstates import LegislatorDatasetCache, normalize_unitedstates
from member_sync.ingestion.user_override import normalize_user_override
from member_sync.models.member import MemberAggregate, MemberRecord, SourceKind
from member_sync.sync.merge import merge_fields
from member_sync.sync.roles import reconcile_roles, sort_roles, well_formed


class StepState(str, Enum):
    MERGED = "merged"
    SKIPPED = "skipped"
    FAILED = "failed"


class StepOutcome(NamedTuple):
    source: SourceKind
    state: StepState
    error: Optional[str] = None


class CycleReport(NamedTuple):
    member_id: str
    outcomes: List[StepOutcome]
    picture: Optional[StepState] = None
    
    def state_of(self, source: SourceKind) -> Optional[StepState]:
        return next((o.state for o in self.outcomes if o.source == source), None)


def merge_snapshot(source: SourceKind, target: MemberRecord, incoming: MemberRecord) -> MemberRecord:
    """Field merge to completion, then role reconciliation."""
    merged = merge_fields(source, target, incoming).record
    roles = reconcile_roles(target.congress_roles, incoming.congress_roles, source, target.id)
    return merged.model_copy(update={"congress_roles": roles})


class SourceStep(NamedTuple):
    """One upstream: how to fetch its raw record, normalize it and merge it."""
    kind: SourceKind
    fetch: Callable[[str], Awaitable[Any]]
    normalize: Callable[[Any], MemberRecord]
    merge: Callable[[SourceKind, MemberRecord, MemberRecord], MemberRecord] = merge_snapshot


def default_steps(transport, legislator_cache: LegislatorDatasetCache) -> Tuple[SourceStep, ...]:
    """BioGuide, then ProPublica, then the congress-legislators dataset."""
    return (
        SourceStep(SourceKind.BIOGUIDE, partial(fetch_bioguide, transport), normalize_bioguide),
        SourceStep(SourceKind.PROPUBLICA, partial(fetch_propublica, transport), normalize_propublica),
        SourceStep(
            SourceKind.UNITEDSTATES,
            partial(legislator_cache.fetch_member, transport),
            normalize_unitedstates
        ),
    )


class MemberSyncOrchestrator:
    """
    Run sync cycles against a fixed, ordered list of source steps.
    
    Usage:
        orchestrator = MemberSyncOrchestrator(transport)
        report = await orchestrator.run(aggregate)
    """
    
    def __init__(
        self,
        transport,
        legislator_cache: Optional[LegislatorDatasetCache] = None,
        picture_fetcher: Optional[Callable[[str], Awaitable[str]]] = None,
        clock: Clock = now_millis,
        steps: Optional[Tuple[SourceStep, ...]] = None,
        fail_limit: Optional[int] = None,
        picture_fail_limit: Optional[int] = None
    ):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.transport = transport
        self.clock = clock
        self.legislator_cache = legislator_cache or LegislatorDatasetCache(clock=clock)
        self.picture_fetcher = picture_fetcher
        self.steps = steps if steps is not None else default_steps(transport, self.legislator_cache)
        self.fail_limit = settings.SOURCE_FAIL_LIMIT if fail_limit is None else fail_limit
        self.picture_fail_limit = (
            settings.PICTURE_FAIL_LIMIT if picture_fail_limit is None else picture_fail_limit
        )
    
    async def prewarm(self) -> bool:
        """Load the congress-legislators datasets before a batch of cycles."""
        try:
            await self.legislator_cache.get(self.transport)
            return True
        except UpstreamUnavailable as e:
            self.logger.error(f"Cannot prefetch the congress-legislators datasets: {e}")
            return False
    
    def is_suppressed(self, snapshot: Optional[MemberRecord]) -> bool:
        """Failed too many times in a row without any success."""
        return (
            snapshot is not None
            and not snapshot.update_timestamp
            and snapshot.fail_count >= self.fail_limit
        )
    
    def apply_override(self, aggregate: MemberAggregate, payload: Union[dict, MemberRecord]) -> None:
        """
        Merge a user override into the user snapshot.

        A payload without an id carries nothing to update and is ignored.
        Invalid field values are dropped (see normalize_user_override).

        Raises:
            OverrideRejected: if the payload belongs to another member
        """
        payload_id = payload.id if isinstance(payload, MemberRecord) else payload.get("id")
        if not payload_id:
            self.logger.debug(f"Override for {aggregate.id} has no id; nothing to update")
            return
        if payload_id != aggregate.id:
            raise OverrideRejected(aggregate.id, payload_id)
        
        incoming = normalize_user_override(payload)
        target = aggregate.user_member or MemberRecord(id=aggregate.id)
        aggregate.user_member = merge_fields(SourceKind.USER_OVERRIDE, target, incoming).record
    
    async def run_step(self, aggregate: MemberAggregate, step: SourceStep) -> StepOutcome:
        snapshot = aggregate.get_snapshot(step.kind)
        
        if self.is_suppressed(snapshot):
            self.logger.debug(
                f"Skipping {step.kind.value} for {aggregate.id}: "
                f"{snapshot.fail_count} failures without a success"
            )
            return StepOutcome(step.kind, StepState.SKIPPED)
        
        try:
            raw = await step.fetch(aggregate.id)
            incoming = step.normalize(raw)
        except Exception as e:
            self.logger.error(
                f"Cannot sync member {aggregate.id} from {step.kind.value}: {e}",
                exc_info=not isinstance(e, UpstreamUnavailable)
            )
            failed = snapshot or MemberRecord(id=aggregate.id)
            aggregate.set_snapshot(
                step.kind,
                failed.model_copy(update={"fail_count": failed.fail_count + 1})
            )
            return StepOutcome(step.kind, StepState.FAILED, str(e))
        
        if snapshot is None:
            merged = incoming.model_copy(update={
                "id": aggregate.id,
                "congress_roles": sort_roles(well_formed(incoming.congress_roles)),
            })
            self.logger.info(f"[Member][{step.kind.value}] {aggregate.id} data added")
        else:
            merged = step.merge(step.kind, snapshot, incoming)
        
        aggregate.set_snapshot(
            step.kind,
            merged.model_copy(update={"update_timestamp": self.clock(), "fail_count": 0})
        )
        return StepOutcome(step.kind, StepState.MERGED)
    
    async def run_sources(self, aggregate: MemberAggregate) -> List[StepOutcome]:
        # Sequential: merge order is fixed
        outcomes = []
        for step in self.steps:
            outcomes.append(await self.run_step(aggregate, step))
        return outcomes
    
    async def sync_picture(self, aggregate: MemberAggregate) -> Optional[StepState]:
        if self.picture_fetcher is None or aggregate.profile_picture_uri:
            return None
        if aggregate.picture_fail_count >= self.picture_fail_limit:
            return StepState.SKIPPED
        
        try:
            uri = await self.picture_fetcher(aggregate.id)
        except Exception as e:
            self.logger.info(f"Cannot download member {aggregate.id}'s profile picture: {e}")
            aggregate.picture_fail_count += 1
            return StepState.FAILED
        
        aggregate.profile_picture_uri = uri
        self.logger.info(f"[Member][bioguide] {aggregate.id} profile picture downloaded")
        return StepState.MERGED
    
    async def run(
        self,
        aggregate: MemberAggregate,
        override: Optional[Union[dict, MemberRecord]] = None
    ) -> CycleReport:
        """
        Run one full cycle against ``aggregate`` (updated in place).
        
        Raises:
            OverrideRejected: if ``override`` belongs to another member
        """
        if override is not None:
            self.apply_override(aggregate, override)
        
        outcomes, picture = await asyncio.gather(
            self.run_sources(aggregate),
            self.sync_picture(aggregate)
        )
        return CycleReport(aggregate.id, outcomes, picture)
