"""ndctl/daxctl command wrapper.

Queries persistent-memory regions and namespaces, creates namespaces and
onlines devdax namespaces as system memory.
"""

import json
import logging
from typing import Any

from pydantic import ValidationError

from noderesource.core.errors import (
    CommandError,
    NamespaceCountError,
    NamespaceModeError,
    ReconcileError,
    RegionNotFoundError,
)
from noderesource.host.base import HostTool
from noderesource.models.pmem import (
    SYSTEM_RAM_MODE,
    DaxDevice,
    NamespaceMode,
    PmemRegion,
    PmemRegions,
)

logger = logging.getLogger(__name__)

# file(1) output for a device without a recognisable signature
_NO_SIGNATURE = "data"


class PmemListingError(ReconcileError):
    """Raised when ndctl or daxctl output cannot be decoded."""


def _load_json(output: str, tool: str) -> Any:
    """Decode JSON output, treating empty output as no entries."""
    text = output.strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise PmemListingError(f"Invalid {tool} output: {e}") from e


def parse_regions(output: str) -> PmemRegions:
    """Parse ``ndctl list -RN`` output.

    ndctl prints an object with a "regions" array, a bare array of regions
    or a single region object depending on how many entries match.

    Args:
        output: Raw command output.

    Returns:
        Parsed region listing.

    Raises:
        PmemListingError: If the output cannot be decoded.
    """
    data = _load_json(output, "ndctl")
    try:
        if data is None:
            return PmemRegions()
        if isinstance(data, list):
            return PmemRegions(regions=[PmemRegion.model_validate(r) for r in data])
        if isinstance(data, dict) and "regions" in data:
            return PmemRegions.model_validate(data)
        if isinstance(data, dict):
            return PmemRegions(regions=[PmemRegion.model_validate(data)])
    except ValidationError as e:
        raise PmemListingError(f"Unexpected ndctl output: {e}") from e
    raise PmemListingError(f"Unexpected ndctl output type: {type(data).__name__}")


def parse_dax_devices(output: str) -> list[DaxDevice]:
    """Parse ``daxctl list`` output.

    Raises:
        PmemListingError: If the output cannot be decoded.
    """
    data = _load_json(output, "daxctl")
    if data is None:
        return []
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise PmemListingError(f"Unexpected daxctl output type: {type(data).__name__}")
    try:
        return [DaxDevice.model_validate(entry) for entry in data]
    except ValidationError as e:
        raise PmemListingError(f"Unexpected daxctl output: {e}") from e


class PmemTool(HostTool):
    """Wrapper around ndctl and daxctl."""

    def list_regions(self) -> PmemRegions:
        """List all regions with their namespaces.

        Raises:
            CommandError: If ndctl fails.
            PmemListingError: If the output cannot be decoded.
        """
        result = self._run_checked(["ndctl", "list", "-RN"])
        return parse_regions(result.stdout)

    def create_namespace(self, region: str, mode: NamespaceMode) -> None:
        """Create a namespace filling the region.

        fsdax is ndctl's default mode, so only devdax is passed explicitly.

        Raises:
            CommandError: If ndctl fails.
        """
        args = ["ndctl", "create-namespace", "-r", region]
        if mode == NamespaceMode.DEVDAX:
            args.append("--mode=devdax")
        try:
            self._mutate(args)
        except CommandError:
            logger.error("Create namespace for region %s failed", region)
            raise
        logger.info("Created %s namespace for region %s", mode.value, region)

    def resolve_namespace_device_path(self, region: str, mode: NamespaceMode) -> tuple[str, str]:
        """Resolve a region to the device path of its single namespace.

        Args:
            region: Region name (e.g., 'region0').
            mode: Required namespace mode.

        Returns:
            Tuple of (device path, namespace name). fsdax namespaces resolve
            to their block device, devdax namespaces to their char device.

        Raises:
            RegionNotFoundError: If the region is not listed.
            NamespaceCountError: If the region does not hold exactly one namespace.
            NamespaceModeError: If the namespace is in another mode.
            CommandError: If ndctl fails.
            PmemListingError: If the output cannot be decoded.
        """
        result = self._run_checked(["ndctl", "list", "-RN", "-r", region])
        regions = parse_regions(result.stdout)
        if not regions.regions:
            raise RegionNotFoundError(region)

        namespaces = regions.regions[0].namespaces
        if len(namespaces) != 1:
            raise NamespaceCountError(region, len(namespaces))

        namespace = namespaces[0]
        if namespace.mode != mode.value:
            raise NamespaceModeError(region, namespace.mode, mode.value)

        device = namespace.blockdev if mode == NamespaceMode.FSDAX else namespace.chardev
        return f"/dev/{device}", namespace.dev

    def check_namespace_used(self, device_path: str) -> bool:
        """Check whether a namespace device is already in use.

        A device is in use when LVM knows it as a physical volume or when
        it carries a filesystem signature.

        Args:
            device_path: Device to check (e.g., '/dev/pmem0').

        Returns:
            True if the device is in use.

        Raises:
            CommandError: If a probe does not finish within the timeout.
        """
        result = self._run(["pvs", device_path])
        if result.success and any(
            "/dev" in line and "Failed to " not in line for line in result.output.splitlines()
        ):
            logger.info("Namespace %s is used as a physical volume", device_path)
            return True

        fstype = self.filesystem_type(device_path)
        if fstype:
            logger.info("Namespace %s is formatted as %s", device_path, fstype)
            return True
        return False

    def filesystem_type(self, device_path: str) -> str:
        """Probe a device for a filesystem signature.

        file(1) is asked first; only if it recognises something is blkid
        used to name the type.

        Returns:
            Filesystem type, or an empty string if none was detected or
            the probe failed.
        """
        sniff = self._run(["file", "-bsL", device_path])
        if not sniff.success or sniff.stdout.strip() == _NO_SIGNATURE:
            return ""

        probe = self._run(["blkid", "-c", "/dev/null", "-o", "export", device_path])
        if not probe.success:
            return ""
        for line in probe.stdout.splitlines():
            key, _, value = line.strip().partition("=")
            if key == "TYPE":
                return value
        return ""

    def tier_to_memory(self, chardev: str) -> None:
        """Online a devdax device as system memory.

        Raises:
            CommandError: If daxctl fails.
        """
        self._mutate(["daxctl", "reconfigure-device", "-m", SYSTEM_RAM_MODE, chardev])

    def is_memory_tiered(self, chardev: str) -> bool:
        """Check whether a devdax device is onlined as system memory.

        Raises:
            CommandError: If daxctl fails.
            PmemListingError: If the output cannot be decoded.
        """
        result = self._run_checked(["daxctl", "list"])
        return any(
            dev.chardev == chardev and dev.is_system_ram for dev in parse_dax_devices(result.stdout)
        )
