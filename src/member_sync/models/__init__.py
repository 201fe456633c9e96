"""Data models module."""

from member_sync.models.member import (
    Chamber,
    Gender,
    SourceKind,
    PartyRecord,
    RoleRecord,
    MemberRecord,
    MemberAggregate,
    FieldChange,
    FieldConflict,
    RoleSnapshot,
    SCALAR_FIELDS,
)

__all__ = [
    "Chamber",
    "Gender",
    "SourceKind",
    "PartyRecord",
    "RoleRecord",
    "MemberRecord",
    "MemberAggregate",
    "FieldChange",
    "FieldConflict",
    "RoleSnapshot",
    "SCALAR_FIELDS",
]
