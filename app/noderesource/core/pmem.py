"""Persistent-memory region lifecycle.

A region moves through these states:

    no namespace -> namespace exists -> device resolved -> in use | available
    available (devdax) -> memory tiered

PmemLifecycle drives a region forward. It creates a namespace only when the
region has none. Regions with several namespaces, or with a namespace of
another mode, are never modified.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from noderesource.core.errors import NamespaceCountError
from noderesource.models.pmem import NamespaceMode, PmemRegions

if TYPE_CHECKING:
    from noderesource.host.pmem import PmemTool

logger = logging.getLogger(__name__)

_REGION_PREFIX = "region"
_NAMESPACE_SUFFIX = ".0"


@dataclass(frozen=True, slots=True)
class ResolvedNamespace:
    """A region resolved to its single namespace.

    Attributes:
        region: Region name.
        namespace: Namespace name (e.g., 'namespace0.0').
        device_path: Block device (fsdax) or char device (devdax) path.
        created: True if the namespace was created during resolution.
    """

    region: str
    namespace: str
    device_path: str
    created: bool = False

    @property
    def device_name(self) -> str:
        """Device path without the /dev/ prefix."""
        return self.device_path.removeprefix("/dev/")


def region_to_namespace(region: str) -> str:
    """Map a region name to the name of its first namespace.

    Example:
        >>> region_to_namespace("region0")
        'namespace0.0'
    """
    return f"namespace{region.removeprefix(_REGION_PREFIX)}{_NAMESPACE_SUFFIX}"


def namespace_block_device(namespace: str, regions: PmemRegions) -> str | None:
    """Find the block device of a namespace across a region listing.

    Returns:
        Block device path, or None if no region holds the namespace.
    """
    for region in regions.regions:
        for candidate in region.namespaces:
            if candidate.dev == namespace and candidate.blockdev:
                return f"/dev/{candidate.blockdev}"
    return None


class PmemLifecycle:
    """Drives persistent-memory regions to a usable device.

    Example:
        >>> lifecycle = PmemLifecycle(PmemTool(host_namespace=True))
        >>> resolved = lifecycle.ensure_namespace("region0", NamespaceMode.FSDAX)
        >>> lifecycle.check_in_use(resolved.device_path)
        False
    """

    def __init__(self, tool: PmemTool) -> None:
        self._tool = tool

    def list_regions(self) -> PmemRegions:
        """Return all regions and their namespaces."""
        return self._tool.list_regions()

    def ensure_namespace(self, region: str, mode: NamespaceMode) -> ResolvedNamespace:
        """Resolve a region to a device, creating its namespace if it has none.

        The region is re-resolved exactly once after creation.

        Args:
            region: Region name.
            mode: Required namespace mode.

        Returns:
            The resolved namespace.

        Raises:
            NamespaceResolutionError: If the region is missing, holds several
                namespaces, holds a namespace of another mode, or still does
                not resolve after creation.
            CommandError: If a host command fails.
        """
        try:
            device_path, namespace = self._tool.resolve_namespace_device_path(region, mode)
        except NamespaceCountError as e:
            if e.count != 0:
                raise
            logger.info("Region %s has no namespace, creating a %s namespace", region, mode.value)
            self._tool.create_namespace(region, mode)
            device_path, namespace = self._tool.resolve_namespace_device_path(region, mode)
            return ResolvedNamespace(region, namespace, device_path, created=True)

        return ResolvedNamespace(region, namespace, device_path)

    def check_in_use(self, device_path: str) -> bool:
        """Check whether a namespace device is used as a PV or holds a filesystem."""
        return self._tool.check_namespace_used(device_path)

    def convert_to_memory_tier(self, chardev: str) -> bool:
        """Online a devdax device as system memory unless it already is.

        Args:
            chardev: Char device name (e.g., 'dax0.0').

        Returns:
            True if the device was reconfigured, False if it was already tiered.

        Raises:
            CommandError: If daxctl fails.
        """
        if self._tool.is_memory_tiered(chardev):
            logger.debug("Device %s is already onlined as system memory", chardev)
            return False
        self._tool.tier_to_memory(chardev)
        logger.info("Onlined %s as system memory", chardev)
        return True
