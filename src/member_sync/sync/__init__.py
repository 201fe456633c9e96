"""Merge, reconcile, orchestrate and resolve member data."""

from member_sync.sync.merge import merge_fields, needs_update
from member_sync.sync.roles import bucket_roles, reconcile_roles, resync_roles
from member_sync.sync.orchestrator import (
    CycleReport,
    MemberSyncOrchestrator,
    SourceStep,
    StepOutcome,
    StepState,
)
from member_sync.sync.resolver import apply_resolution, resolve_projection
from member_sync.sync.service import MemberSyncService, create_service

__all__ = [
    "merge_fields",
    "needs_update",
    "bucket_roles",
    "reconcile_roles",
    "resync_roles",
    "CycleReport",
    "MemberSyncOrchestrator",
    "SourceStep",
    "StepOutcome",
    "StepState",
    "apply_resolution",
    "resolve_projection",
    "MemberSyncService",
    "create_service",
]
