"""Quota path reconciler.

Mounts a device or a persistent-memory namespace at each configured path
with project quota enabled. Blank devices are formatted first; devices
holding a different filesystem are reported and left alone.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from noderesource.core.context import AgentContext
from noderesource.core.errors import (
    ConfigurationError,
    ExistsFormatError,
    ReconcileError,
)
from noderesource.host.events import REASON_EXISTS_FORMAT_ERROR, EventType
from noderesource.models.pmem import NamespaceMode
from noderesource.models.result import (
    ActionType,
    ItemResult,
    ResourceKind,
    fatal,
    recoverable,
    succeeded,
)
from noderesource.models.rule import ResourceRule, TopologyType
from noderesource.reconcilers.base import Reconciler

logger = logging.getLogger(__name__)

# Passed to mkfs so the filesystem supports project quotas
QUOTA_MKFS_OPTIONS = ["-O", "project,quota"]


@dataclass(frozen=True, slots=True)
class QuotaPathSpec:
    """Desired backing of one mount path.

    Attributes:
        type: Topology type (device or pmem).
        devices: Candidate devices, for device-backed paths.
        region: Region name, for region-backed paths.
        fstype: Filesystem type; empty means ext4.
        options: Mount options.
    """

    type: str
    devices: tuple[str, ...] = ()
    region: str = ""
    fstype: str = ""
    options: str = ""


class QuotaPathReconciler(Reconciler):
    """Reconciler for quota-enabled mount paths."""

    def __init__(self, context: AgentContext) -> None:
        super().__init__(context)
        self.device_paths: dict[str, QuotaPathSpec] = {}
        self.region_paths: dict[str, QuotaPathSpec] = {}

    @property
    def kind(self) -> ResourceKind:
        """Return the quota path kind."""
        return ResourceKind.QUOTA_PATH

    def analyse_desired_state(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ItemResult]:
        """Partition matching rules into device- and region-backed paths.

        A mount path is kept only for its first matching rule; later rules
        for the same path are reported and dropped.
        """
        device_paths: dict[str, QuotaPathSpec] = {}
        region_paths: dict[str, QuotaPathSpec] = {}
        results: list[ItemResult] = []

        for rule in self._matching(rules, node_labels):
            path = rule.name
            topology = rule.topology
            if not path:
                results.append(self._reject("<unnamed>", "Quota path rule has no mount path"))
                continue
            if path in device_paths or path in region_paths:
                results.append(
                    self._reject(path, f"Mount path {path} is configured more than once on this node")
                )
                continue

            match topology.type:
                case TopologyType.DEVICE:
                    device_paths[path] = QuotaPathSpec(
                        type=topology.type,
                        devices=tuple(topology.devices),
                        fstype=topology.fstype,
                        options=topology.options,
                    )
                case TopologyType.PMEM:
                    if len(topology.regions) != 1:
                        results.append(
                            self._reject(
                                path,
                                f"Quota path supports exactly one region, got {len(topology.regions)}",
                            )
                        )
                        continue
                    region_paths[path] = QuotaPathSpec(
                        type=topology.type,
                        region=topology.regions[0],
                        fstype=topology.fstype,
                        options=topology.options,
                    )
                case other:
                    results.append(self._reject(path, f"Unsupported topology type {other!r}"))

        self.device_paths = device_paths
        self.region_paths = region_paths
        return results

    def apply_diff(self) -> list[ItemResult]:
        """Mount every desired path. Paths are processed independently."""
        results = [self._apply_device_path(path, spec) for path, spec in self.device_paths.items()]
        results.extend(
            self._apply_region_path(path, spec) for path, spec in self.region_paths.items()
        )
        return results

    def _apply_device_path(self, path: str, spec: QuotaPathSpec) -> ItemResult:
        """Mount the first existing candidate device at ``path``."""
        mounter = self.context.mounter
        logger.info("Quota path %s: candidate devices %s", path, ", ".join(spec.devices))
        failed = self._ensure_folder(path)
        if failed is not None:
            return failed

        device = next((d for d in spec.devices if mounter.file_exists(d)), None)
        if device is None:
            error = f"None of the configured devices exist: [{', '.join(spec.devices)}]"
            logger.error("Quota path %s: %s", path, error)
            return recoverable(self.kind, path, error)

        return self._mount(path, device, spec)

    def _apply_region_path(self, path: str, spec: QuotaPathSpec) -> ItemResult:
        """Resolve the region to an fsdax device and mount it at ``path``."""
        logger.info("Quota path %s: region %s", path, spec.region)
        try:
            resolved = self.context.pmem.ensure_namespace(spec.region, NamespaceMode.FSDAX)
        except ReconcileError as e:
            logger.error("Quota path %s: cannot resolve region %s: %s", path, spec.region, e)
            return fatal(self.kind, path, str(e))

        failed = self._ensure_folder(path)
        if failed is not None:
            return failed
        return self._mount(path, resolved.device_path, spec)

    def _ensure_folder(self, path: str) -> ItemResult | None:
        """Create the mount directory, returning a failed result if that fails."""
        try:
            self.context.mounter.ensure_folder(path)
        except ReconcileError as e:
            logger.error("Quota path %s: cannot create mount directory: %s", path, e)
            return fatal(self.kind, path, str(e), action=ActionType.FORMAT_AND_MOUNT)
        return None

    def _mount(self, path: str, device: str, spec: QuotaPathSpec) -> ItemResult:
        """Format and mount ``device`` at ``path`` unless already mounted."""
        mounter = self.context.mounter
        try:
            if mounter.is_mounted(path):
                logger.debug("Quota path %s is already mounted", path)
                return succeeded(self.kind, path, ActionType.NOOP)
            mounter.format_and_mount(device, path, spec.fstype, QUOTA_MKFS_OPTIONS, spec.options)
        except ExistsFormatError as e:
            logger.error("Quota path %s: %s", path, e)
            self.context.events.record_event(EventType.WARNING, REASON_EXISTS_FORMAT_ERROR, str(e))
            return fatal(self.kind, path, str(e), action=ActionType.FORMAT_AND_MOUNT)
        except (ReconcileError, OSError, ValueError) as e:
            logger.error("Quota path %s: mounting %s failed: %s", path, device, e)
            return fatal(self.kind, path, str(e), action=ActionType.FORMAT_AND_MOUNT)

        logger.info("Mounted %s at %s", device, path)
        return succeeded(self.kind, path, ActionType.FORMAT_AND_MOUNT, f"Mounted {device}")

    def _reject(self, path: str, message: str) -> ItemResult:
        """Report a configuration problem for one mount path."""
        error = ConfigurationError(message)
        logger.error("Quota path %s: %s", path, error)
        return recoverable(self.kind, path, str(error))
