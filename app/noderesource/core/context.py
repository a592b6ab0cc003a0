"""Shared collaborators of the reconcilers.

One AgentContext is built at startup and handed to every reconciler, so
nothing depends on process-wide state or initialisation order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from noderesource.core.pmem import PmemLifecycle
    from noderesource.host.events import EventRecorder
    from noderesource.host.inventory import LocalDiskInventory
    from noderesource.host.lvm import LvmTool
    from noderesource.host.mounter import Mounter


@dataclass(frozen=True, slots=True)
class AgentContext:
    """Collaborators used while reconciling.

    Attributes:
        mounter: Folder, format and mount primitives.
        lvm: LVM listing and volume group mutations.
        pmem: Persistent-memory lifecycle.
        events: Event sink.
        inventory: Local disk enumeration.
    """

    mounter: Mounter
    lvm: LvmTool
    pmem: PmemLifecycle
    events: EventRecorder
    inventory: LocalDiskInventory
