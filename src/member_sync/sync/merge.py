"""
Field merge engine.

Folds one source's freshly built record into that source's stored
snapshot, one scalar field at a time. Every effective change is logged as
``[Member][<source>] <id> <field>: ...`` and returned as a FieldChange.
"""
import logging
from enum import Enum
from typing import Any, List, NamedTuple, Optional

from member_sync.models.member import SCALAR_FIELDS, FieldChange, MemberRecord, SourceKind

logger = logging.getLogger(__name__)

ADDED = "added"
REMOVED = "removed"
CHANGED = "changed"


class MergeResult(NamedTuple):
    record: MemberRecord
    changes: List[FieldChange]


def is_empty(value: Any) -> bool:
    return value is None or value == "" or value == [] or value == {}


def as_text(value: Any) -> str:
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _trim(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip() or None
    return value


def classify_change(source: SourceKind, old: Any, new: Any) -> Optional[str]:
    """
    Decide whether ``old`` should be replaced by ``new``.
    
    Returns:
        "added", "removed" or "changed", or None when no update is needed
    """
    # User edits are additive only
    if source == SourceKind.USER_OVERRIDE and is_empty(new):
        return None
    
    if old == new:
        return None
    
    if is_empty(old) and is_empty(new):
        return None
    
    if is_empty(old):
        return ADDED
    if is_empty(new):
        return REMOVED
    return CHANGED


def log_change(source: SourceKind, member_id: str, field: str, kind: str, old: Any, new: Any) -> None:
    prefix = f"[Member][{source.value}] {member_id} {field}:"
    if kind == ADDED:
        logger.info(f"{prefix} {as_text(new)} added")
    elif kind == REMOVED:
        logger.info(f"{prefix} {as_text(old)} removed")
    else:
        logger.info(f"{prefix} {as_text(old)} -> {as_text(new)}")


def needs_update(
    source: SourceKind,
    field: str,
    old: Any,
    new: Any,
    member_id: str = "-"
) -> bool:
    """
    True when ``field`` should take ``new``; logs the change if so.
    
    The outcome depends on the source only through the user-override
    rule: an empty override value never clears anything.
    """
    kind = classify_change(source, old, new)
    if kind is None:
        return False
    log_change(source, member_id, field, kind, old, new)
    return True


def merge_fields(source: SourceKind, target: MemberRecord, incoming: MemberRecord) -> MergeResult:
    """
    Merge every scalar field of ``incoming`` into ``target``.
    
    Roles and sync bookkeeping are left untouched; see roles.reconcile_roles.
    
    Args:
        source: Source that produced ``incoming``
        target: The source's current snapshot
        incoming: Record just built from the source's data
        
    Returns:
        MergeResult with a new record and the effective changes
    """
    updates = {}
    changes: List[FieldChange] = []
    
    for field in SCALAR_FIELDS:
        old = getattr(target, field)
        new = _trim(getattr(incoming, field))
        
        kind = classify_change(source, old, new)
        if kind is None:
            continue
        
        log_change(source, target.id, field, kind, old, new)
        updates[field] = new
        changes.append(FieldChange(field=field, kind=kind, old=old, new=new))
    
    return MergeResult(target.model_copy(update=updates), changes)
