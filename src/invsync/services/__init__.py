"""Reconciliation services for invsync."""

from invsync.services.reconciler import (
    ChangeSet,
    InventoryReconciler,
    ReconciliationResult,
    carry_identities,
)
from invsync.services.resolver import GroupResolver, resolve_group_id
from invsync.services.snapshot import SnapshotBuilder

__all__ = [
    "ChangeSet",
    "GroupResolver",
    "InventoryReconciler",
    "ReconciliationResult",
    "SnapshotBuilder",
    "carry_identities",
    "resolve_group_id",
]
