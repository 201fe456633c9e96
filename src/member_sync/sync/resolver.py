"""
Cross-source resolver.

Computes a member's outward-facing projection from the per-source
snapshots. Snapshots are only read here, never modified.

Scalar fields: a non-empty user override always wins. Otherwise BioGuide
is taken first, then UnitedStates and ProPublica are considered in turn; a
later value replaces the current answer only when the answer is empty or
the later value extends it (e.g. "Bob" -> "Bob Jr."). Any other
disagreement is logged as a conflict and the earlier value is kept.

Roles: ProPublica, UnitedStates and BioGuide roles are bucketed by
overlapping intervals, in that order.
"""
import logging
from typing import Any, Dict, List, NamedTuple, Optional

from member_sync.models.member import (
    SCALAR_FIELDS,
    FieldConflict,
    MemberAggregate,
    MemberRecord,
    RoleRecord,
    SourceKind,
)
from member_sync.sync.merge import as_text, is_empty
from member_sync.sync.roles import bucket_roles

logger = logging.getLogger(__name__)

FIELD_PRECEDENCE = (SourceKind.BIOGUIDE, SourceKind.UNITEDSTATES, SourceKind.PROPUBLICA)
ROLE_PRECEDENCE = (SourceKind.PROPUBLICA, SourceKind.UNITEDSTATES, SourceKind.BIOGUIDE)


class Resolution(NamedTuple):
    projection: MemberRecord
    override_conflicts: Dict[str, Any]
    source_conflicts: List[FieldConflict]


def _snapshot_value(aggregate: MemberAggregate, source: SourceKind, field: str) -> Any:
    snapshot = aggregate.get_snapshot(source)
    return getattr(snapshot, field) if snapshot is not None else None


def resolve_field(
    aggregate: MemberAggregate,
    field: str,
    skip_user: bool = False,
    conflicts: Optional[List[FieldConflict]] = None
) -> Any:
    """
    Resolve one scalar field across the snapshots.
    
    Args:
        aggregate: Member whose snapshots are read
        field: Name of a scalar MemberRecord field
        skip_user: Ignore the user override (the "synced" value)
        conflicts: Optional list collecting source disagreements
        
    Returns:
        The resolved value, or None if no source has one
    """
    if not skip_user:
        user_value = _snapshot_value(aggregate, SourceKind.USER_OVERRIDE, field)
        if not is_empty(user_value):
            return user_value
    
    answer = None
    for source in FIELD_PRECEDENCE:
        value = _snapshot_value(aggregate, source, field)
        if is_empty(value) or value == answer:
            continue
        
        if is_empty(answer):
            answer = value
            continue
        
        # A longer value starting with the answer is a more complete version of it
        if as_text(value).startswith(as_text(answer)):
            answer = value
            continue
        
        logger.info(
            f"[MemberDataMerge] {aggregate.id} {field}: "
            f"Data Conflict with {source.value} - '{as_text(answer)}' <> '{as_text(value)}'"
        )
        if conflicts is not None:
            conflicts.append(FieldConflict(field=field, source=source, current=answer, incoming=value))
    
    return answer


def resolve_roles(aggregate: MemberAggregate) -> List[RoleRecord]:
    """Bucket the synced sources' roles; user overrides carry no roles."""
    role_lists = []
    for source in ROLE_PRECEDENCE:
        snapshot = aggregate.get_snapshot(source)
        if snapshot is not None:
            role_lists.append(snapshot.congress_roles)
    return bucket_roles(role_lists, aggregate.id)


def resolve_projection(aggregate: MemberAggregate) -> Resolution:
    """
    Compute the projection for every field.
    
    Where a user override disagrees with the synced value, the synced value
    is kept in ``override_conflicts`` so the disagreement stays visible.
    """
    values = {}
    override_conflicts: Dict[str, Any] = {}
    source_conflicts: List[FieldConflict] = []
    
    for field in SCALAR_FIELDS:
        synced = resolve_field(aggregate, field, skip_user=True, conflicts=source_conflicts)
        override = _snapshot_value(aggregate, SourceKind.USER_OVERRIDE, field)
        
        if is_empty(override):
            values[field] = synced
            continue
        
        values[field] = override
        if not is_empty(synced) and synced != override:
            override_conflicts[field] = synced
            logger.info(
                f'[Resolve][{aggregate.id}] {field} conflict with userData > '
                f'"{as_text(override)}" / "{as_text(synced)}"'
            )
    
    timestamps = [
        snapshot.update_timestamp
        for snapshot in (aggregate.get_snapshot(s) for s in FIELD_PRECEDENCE)
        if snapshot is not None
    ]
    
    projection = MemberRecord(
        id=aggregate.id,
        congress_roles=resolve_roles(aggregate),
        update_timestamp=max(timestamps, default=0),
        **values
    )
    return Resolution(projection, override_conflicts, source_conflicts)


def apply_resolution(aggregate: MemberAggregate) -> Resolution:
    """Recompute and store the projection fields on the aggregate."""
    resolution = resolve_projection(aggregate)
    aggregate.projection = resolution.projection
    aggregate.override_conflicts = resolution.override_conflicts
    aggregate.source_conflicts = resolution.source_conflicts
    return resolution
