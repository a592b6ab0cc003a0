"""Data models for noderesource.

This module exports the core data structures used throughout the application.
"""

from noderesource.models.lvm import LogicalVolume, LVAttributes, PhysicalVolume, VolumeGroup
from noderesource.models.pmem import (
    DaxDevice,
    NamespaceMode,
    PmemNamespace,
    PmemRegion,
    PmemRegions,
)
from noderesource.models.result import (
    ActionType,
    ItemResult,
    ResourceKind,
    ResultStatus,
    SweepReport,
)
from noderesource.models.rule import ResourceRule, Selector, SelectorOperator, Topology, TopologyType

__all__ = [
    "ActionType",
    "DaxDevice",
    "ItemResult",
    "LVAttributes",
    "LogicalVolume",
    "NamespaceMode",
    "PhysicalVolume",
    "PmemNamespace",
    "PmemRegion",
    "PmemRegions",
    "ResourceKind",
    "ResourceRule",
    "ResultStatus",
    "Selector",
    "SelectorOperator",
    "SweepReport",
    "Topology",
    "TopologyType",
    "VolumeGroup",
]
