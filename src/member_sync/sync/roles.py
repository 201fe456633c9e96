"""
Role interval reconciler.

Two ways of combining congress roles:

- resync_roles: a structured source's fresh role list against the list
  it produced last time. Roles are matched by identical start date (a
  source may report several terms starting the same day, matched in
  order); the source is authoritative, so unmatched old roles are dropped.
- bucket_roles: roles from independent sources grouped by overlapping
  date intervals, each role joining the first bucket it overlaps.

Dates are canonical strings, so all comparisons are plain string
comparisons. Every function builds new lists; inputs are never mutated.
"""
import logging
from typing import Iterable, List, Optional

from member_sync.config.constants import MAX_CONGRESSES_PER_ROLE, OPEN_END_DATE, OPEN_START_DATE
from member_sync.models.member import RoleRecord, SourceKind
from member_sync.sync.merge import classify_change, log_change

logger = logging.getLogger(__name__)

ROLE_FIELDS = (
    "congress_numbers",
    "chamber",
    "start_date",
    "end_date",
    "parties",
    "state",
    "district",
    "senator_class",
)


def is_malformed(role: RoleRecord) -> bool:
    """Open-ended or inverted intervals cannot take part in a merge."""
    if role.start_date == OPEN_START_DATE or role.end_date == OPEN_END_DATE:
        return True
    return role.start_date > role.end_date


def well_formed(roles: Iterable[RoleRecord]) -> List[RoleRecord]:
    return [role for role in roles if not is_malformed(role)]


def sort_roles(roles: Iterable[RoleRecord]) -> List[RoleRecord]:
    return sorted(roles, key=lambda role: role.start_date)


def overlaps(a: RoleRecord, b: RoleRecord) -> bool:
    """
    Whether two role intervals overlap.
    
    Intervals are closed: a role ending on the day the next one starts
    (consecutive congresses) counts as overlapping.
    """
    return not (a.end_date < b.start_date or b.end_date < a.start_date)


def _differs(a, b) -> bool:
    return a is not None and b is not None and a != b


def inconsistency(a: RoleRecord, b: RoleRecord) -> Optional[str]:
    """Why two roles cannot be combined, or None if they can."""
    congresses = set(a.congress_numbers) | set(b.congress_numbers)
    if len(congresses) > MAX_CONGRESSES_PER_ROLE:
        return f"{len(congresses)} congresses"
    if a.chamber != b.chamber:
        return f"chamber {a.chamber.value} <> {b.chamber.value}"
    if _differs(a.state, b.state):
        return f"state {a.state} <> {b.state}"
    if _differs(a.district, b.district):
        return f"district {a.district} <> {b.district}"
    if _differs(a.senator_class, b.senator_class):
        return f"senator class {a.senator_class} <> {b.senator_class}"
    return None


def combine_roles(a: RoleRecord, b: RoleRecord) -> RoleRecord:
    """Union of two consistent roles. Parties are concatenated, not deduplicated."""
    return RoleRecord(
        congress_numbers=sorted(set(a.congress_numbers) | set(b.congress_numbers)),
        chamber=a.chamber,
        start_date=min(a.start_date, b.start_date),
        end_date=max(a.end_date, b.end_date),
        parties=a.parties + b.parties,
        state=a.state if a.state is not None else b.state,
        district=a.district if a.district is not None else b.district,
        senator_class=a.senator_class if a.senator_class is not None else b.senator_class,
    )


def try_combine(a: RoleRecord, b: RoleRecord, member_id: str = "-") -> Optional[RoleRecord]:
    reason = inconsistency(a, b)
    if reason is not None:
        logger.warning(f"[RoleMerge] {member_id} cannot combine {a} with {b}: {reason}")
        return None
    return combine_roles(a, b)


def bucket_roles(role_lists: Iterable[Iterable[RoleRecord]], member_id: str = "-") -> List[RoleRecord]:
    """
    Group roles from several sources into buckets of overlapping intervals.
    
    Lists are consumed in order, so earlier lists open the buckets later
    ones join. A role joins the first bucket it overlaps, not the best
    fitting one; if it cannot be combined with that bucket it stays a
    separate entry.
    
    Args:
        role_lists: One role list per source, in precedence order
        
    Returns:
        Combined roles sorted by start date
    """
    buckets: List[RoleRecord] = []
    
    for roles in role_lists:
        for role in sort_roles(well_formed(roles)):
            idx = next((i for i, bucket in enumerate(buckets) if overlaps(bucket, role)), None)
            
            combined = try_combine(buckets[idx], role, member_id) if idx is not None else None
            if combined is None:
                buckets = buckets + [role]
            else:
                buckets = buckets[:idx] + [combined] + buckets[idx + 1:]
    
    return sort_roles(buckets)


def _party_text(role: RoleRecord) -> str:
    return " / ".join(f"{p.party} ({p.start_date} - {p.end_date})" for p in role.parties)


def _log_role_update(source: SourceKind, member_id: str, old: RoleRecord, new: RoleRecord) -> None:
    note = f"congressRole[from: {old.start_date}]"
    for field in ROLE_FIELDS:
        if field == "parties":
            old_value, new_value = _party_text(old), _party_text(new)
        else:
            old_value, new_value = getattr(old, field), getattr(new, field)
        kind = classify_change(source, old_value, new_value)
        if kind is not None:
            log_change(source, member_id, f"{note}.{field}", kind, old_value, new_value)


def resync_roles(
    target_roles: List[RoleRecord],
    source_roles: List[RoleRecord],
    source: SourceKind,
    member_id: str = "-"
) -> List[RoleRecord]:
    """
    Merge a structured source's fresh roles into the roles it gave last time.
    
    Returns:
        The new role list, sorted by start date
    """
    targets = well_formed(target_roles)
    incoming = well_formed(source_roles)
    
    by_start = {}
    for idx, role in enumerate(targets):
        by_start.setdefault(role.start_date, []).append(idx)
    
    used_counts = {}
    updated = {}
    appended: List[RoleRecord] = []
    
    for role in incoming:
        candidates = by_start.get(role.start_date, [])
        used = used_counts.get(role.start_date, 0)
        
        if used >= len(candidates):
            logger.info(f"[Member][{source.value}] {member_id} congressRole[from: {role.start_date}] added")
            appended.append(role)
            continue
        
        idx = candidates[used]
        used_counts[role.start_date] = used + 1
        
        reason = inconsistency(targets[idx], role)
        if reason is not None:
            # Kept apart; the stale target is dropped below as unmatched
            logger.warning(
                f"[RoleMerge] {member_id} {source.value} role {role} does not match {targets[idx]}: {reason}"
            )
            appended.append(role)
            continue
        
        _log_role_update(source, member_id, targets[idx], role)
        updated[idx] = role
    
    for idx, role in enumerate(targets):
        if idx not in updated:
            logger.info(f"[Member][{source.value}] {member_id} congressRole[from: {role.start_date}] deleted")
    
    kept = [updated[idx] for idx in range(len(targets)) if idx in updated]
    return sort_roles(kept + appended)


def reconcile_roles(
    target_roles: List[RoleRecord],
    source_roles: List[RoleRecord],
    source: SourceKind,
    member_id: str = "-"
) -> List[RoleRecord]:
    """
    Fold ``source_roles`` into ``target_roles`` for the given source.
    
    User overrides never contribute roles, so their target list is
    returned as-is.
    """
    if not source.is_data_sync:
        return list(target_roles)
    return resync_roles(target_roles, source_roles, source, member_id)
