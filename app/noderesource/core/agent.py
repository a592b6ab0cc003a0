"""Agent assembly.

Factory functions that build the host collaborators, the reconcilers and
the orchestrator from AgentSettings. Shared by the `run` and `sweep` CLI
commands.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from noderesource.core.context import AgentContext
from noderesource.core.orchestrator import ReconciliationOrchestrator
from noderesource.core.pmem import PmemLifecycle
from noderesource.host.events import EventRecorder, LoggingEventRecorder
from noderesource.host.inventory import LocalDiskInventory
from noderesource.host.lvm import LvmTool
from noderesource.host.mounter import Mounter
from noderesource.host.node import KubectlNodeSource, NodeLabelSource, StaticNodeSource
from noderesource.host.pmem import PmemTool
from noderesource.reconcilers.memory import MemoryReconciler
from noderesource.reconcilers.quotapath import QuotaPathReconciler
from noderesource.reconcilers.volumegroup import VolumeGroupReconciler

if TYPE_CHECKING:
    from noderesource.core.settings import AgentSettings
    from noderesource.reconcilers.base import Reconciler

logger = logging.getLogger(__name__)


def get_node_source(settings: AgentSettings) -> NodeLabelSource:
    """Pick the node label source.

    Static labels win over the cluster lookup.
    """
    if settings.labels is not None:
        return StaticNodeSource(settings.labels)
    return KubectlNodeSource(
        settings.node_id,
        kubeconfig=settings.kubeconfig,
        master=settings.master,
    )


def build_context(
    settings: AgentSettings,
    events: EventRecorder | None = None,
) -> AgentContext:
    """Create the host collaborators.

    Args:
        settings: Agent settings.
        events: Event sink; a LoggingEventRecorder when None.

    Returns:
        Context shared by all reconcilers.
    """
    options = {"dry_run": settings.dry_run, "host_namespace": settings.host_namespace}
    mounter = Mounter(**options)
    return AgentContext(
        mounter=mounter,
        lvm=LvmTool(**options),
        pmem=PmemLifecycle(PmemTool(**options)),
        events=events or LoggingEventRecorder(),
        inventory=LocalDiskInventory(mounter, settings.local_disk_count),
    )


def get_reconcilers(context: AgentContext) -> list[Reconciler]:
    """Create the reconcilers in the order they run in a sweep."""
    return [
        VolumeGroupReconciler(context),
        QuotaPathReconciler(context),
        MemoryReconciler(context),
    ]


def build_orchestrator(
    settings: AgentSettings,
    node_labels: Mapping[str, str],
    context: AgentContext | None = None,
) -> ReconciliationOrchestrator:
    """Create a ready-to-run orchestrator.

    Args:
        settings: Agent settings.
        node_labels: Labels of this node.
        context: Pre-built collaborators; built from settings when None.

    Returns:
        Orchestrator over volume groups, quota paths and memory.
    """
    context = context or build_context(settings)
    if settings.dry_run:
        logger.info("Dry-run mode: host state will not be modified")
    return ReconciliationOrchestrator(
        get_reconcilers(context),
        node_labels,
        settings.config_dir,
        interval=settings.interval,
    )
