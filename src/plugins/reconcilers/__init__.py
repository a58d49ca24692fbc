"""
Reconciler plugins package.

Reconciler plugins own the create/read/delete logic for one or more resource
types. They are discovered via Python entry points (group: 'shedctl.reconcilers').
"""

from plugins.reconcilers.base import (
    ReconcilerPlugin,
    ReconcilerContext,
    ReconcileResult,
)
from plugins.reconcilers.repository import RepositoryReconciler

__all__ = [
    "ReconcilerPlugin",
    "ReconcilerContext",
    "ReconcileResult",
    "RepositoryReconciler",
]
