"""Reconcilers for each resource kind.

This module exports the reconciler classes run by the orchestrator.
"""

from noderesource.reconcilers.base import Reconciler
from noderesource.reconcilers.memory import MemoryReconciler
from noderesource.reconcilers.quotapath import QuotaPathReconciler
from noderesource.reconcilers.volumegroup import VolumeGroupReconciler

__all__ = [
    "MemoryReconciler",
    "QuotaPathReconciler",
    "Reconciler",
    "VolumeGroupReconciler",
]
