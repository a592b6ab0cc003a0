"""Volume group reconciler.

Creates volume groups and extends them with missing physical volumes.
Groups are backed either by block devices or by persistent-memory regions.
Members are never removed: a group holding a PV that is no longer desired
is reported and left untouched.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from noderesource.core.context import AgentContext
from noderesource.core.diff import PlanAction, VolumeGroupPlan, difference, plan_volume_group
from noderesource.core.errors import (
    CommandError,
    DestructiveChangeError,
    DeviceNotExistsError,
    ReconcileError,
    RegionInUseError,
)
from noderesource.host.events import REASON_DEVICE_NOT_EXISTS, EventType
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

# Item name of kind-level results
ACTUAL_STATE_ITEM = "volume-groups"

_PLAN_ACTIONS = {
    PlanAction.CREATE: ActionType.CREATE_GROUP,
    PlanAction.EXTEND: ActionType.EXTEND_GROUP,
    PlanAction.NOOP: ActionType.NOOP,
    PlanAction.REFUSE: ActionType.REFUSE,
}


@dataclass(frozen=True, slots=True)
class VolumeGroupSpec:
    """Desired device-backed volume group.

    Attributes:
        physical_volumes: Existing devices that should be members.
    """

    physical_volumes: tuple[str, ...]


class VolumeGroupReconciler(Reconciler):
    """Reconciler for device- and pmem-backed volume groups."""

    def __init__(self, context: AgentContext) -> None:
        super().__init__(context)
        self.device_groups: dict[str, VolumeGroupSpec] = {}
        self.region_groups: dict[str, tuple[str, ...]] = {}

    @property
    def kind(self) -> ResourceKind:
        """Return the volume group kind."""
        return ResourceKind.VOLUME_GROUP

    def analyse_desired_state(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ItemResult]:
        """Build the desired device and region maps.

        Only devices present on this node become candidates. Missing devices
        are reported as recoverable and recorded as events.
        A failing region listing only fails the pmem-backed groups.
        """
        device_groups: dict[str, VolumeGroupSpec] = {}
        region_groups: dict[str, tuple[str, ...]] = {}
        results: list[ItemResult] = []
        known_regions: set[str] | None = None
        listing_error: ReconcileError | None = None

        for rule in self._matching(rules, node_labels):
            name = rule.name
            if not name:
                results.append(recoverable(self.kind, "<unnamed>", "Volume group rule has no name"))
                continue
            if name in device_groups or name in region_groups:
                logger.warning("Duplicate volume group %s in configuration, ignoring", name)
                results.append(recoverable(self.kind, name, f"Duplicate volume group {name} ignored"))
                continue

            match rule.topology.type:
                case TopologyType.DEVICE:
                    devices = self._existing_devices(name, rule.topology.devices, results)
                    if devices:
                        device_groups[name] = VolumeGroupSpec(tuple(devices))
                    else:
                        results.append(recoverable(self.kind, name, "No configured device exists"))
                case TopologyType.LOCAL_DISK | TopologyType.ALIBABACLOUD_LOCAL_DISK:
                    devices = self.context.inventory.list_devices()
                    if devices:
                        device_groups[name] = VolumeGroupSpec(tuple(devices))
                    else:
                        results.append(
                            recoverable(self.kind, name, "No local disk found on this node")
                        )
                case TopologyType.PVC:
                    logger.debug("Volume group %s uses pvc topology, not supported yet", name)
                case TopologyType.PMEM:
                    if known_regions is None and listing_error is None:
                        try:
                            known_regions = self.context.pmem.list_regions().names
                        except ReconcileError as e:
                            logger.error("Cannot list pmem regions: %s", e)
                            listing_error = e
                    if known_regions is None:
                        error = f"Cannot list pmem regions: {listing_error}"
                        results.append(fatal(self.kind, name, error))
                        continue
                    regions = [r for r in rule.topology.regions if r in known_regions]
                    for missing in difference(rule.topology.regions, known_regions):
                        logger.error("Region %s of volume group %s does not exist", missing, name)
                        results.append(
                            recoverable(self.kind, name, f"Region {missing} does not exist")
                        )
                    if regions:
                        region_groups[name] = tuple(regions)
                case other:
                    logger.error("Unsupported volume group topology type: %r", other)
                    results.append(
                        recoverable(self.kind, name, f"Unsupported topology type {other!r}")
                    )

        self.device_groups = device_groups
        self.region_groups = region_groups
        return results

    def apply_diff(self) -> list[ItemResult]:
        """Create or extend every desired group."""
        try:
            members = self.context.lvm.volume_group_members()
        except ReconcileError as e:
            logger.error("Cannot determine actual volume groups: %s", e)
            return [fatal(self.kind, ACTUAL_STATE_ITEM, str(e))]

        results: list[ItemResult] = []
        for name, spec in self.device_groups.items():
            logger.info("Volume group %s: desired %s", name, ", ".join(spec.physical_volumes))
            plan = plan_volume_group(name, spec.physical_volumes, members.get(name))
            results.append(self._execute(plan))

        for name, regions in self.region_groups.items():
            results.append(self._apply_region_group(name, regions, members.get(name)))

        return results

    def _apply_region_group(
        self,
        name: str,
        regions: tuple[str, ...],
        actual: list[str] | None,
    ) -> ItemResult:
        """Resolve the group's regions to devices and plan like a device group.

        The whole group is skipped if any region fails to resolve, or if a
        resolved device is in use by anything but this group.
        """
        logger.info("Volume group %s: desired regions %s", name, ", ".join(regions))
        devices: list[str] = []
        in_use: list[str] = []
        for region in regions:
            try:
                resolved = self.context.pmem.ensure_namespace(region, NamespaceMode.FSDAX)
                if self.context.pmem.check_in_use(resolved.device_path):
                    logger.warning("Region %s device %s is in use", region, resolved.device_path)
                    in_use.append(resolved.device_path)
            except ReconcileError as e:
                logger.error("Volume group %s: cannot resolve region %s: %s", name, region, e)
                return fatal(self.kind, name, str(e))
            devices.append(resolved.device_path)

        conflicts = difference(in_use, actual or [])
        if conflicts:
            error = RegionInUseError(
                f"Devices [{', '.join(conflicts)}] of volume group {name} are used by another consumer"
            )
            logger.error("%s", error)
            return fatal(self.kind, name, str(error), action=ActionType.REFUSE)

        return self._execute(plan_volume_group(name, devices, actual))

    def _execute(self, plan: VolumeGroupPlan) -> ItemResult:
        """Run the LVM command of a plan and report the outcome."""
        action = _PLAN_ACTIONS[plan.action]
        pvs = list(plan.physical_volumes)
        try:
            match plan.action:
                case PlanAction.CREATE:
                    logger.info("Creating volume group %s with %s", plan.name, ", ".join(pvs))
                    self.context.lvm.create_volume_group(plan.name, pvs, [])
                    message = f"Created with {', '.join(pvs)}"
                case PlanAction.EXTEND:
                    logger.info("Extending volume group %s with %s", plan.name, ", ".join(pvs))
                    self.context.lvm.extend_volume_group(plan.name, pvs)
                    message = f"Extended with {', '.join(pvs)}"
                case PlanAction.NOOP:
                    return succeeded(self.kind, plan.name, action)
                case PlanAction.REFUSE:
                    error = DestructiveChangeError(plan.reason or f"Refused to change {plan.name}")
                    logger.error("%s", error)
                    return fatal(self.kind, plan.name, str(error), action=action)
        except CommandError as e:
            logger.error("Volume group %s: %s", plan.name, e)
            return fatal(self.kind, plan.name, str(e), action=action)
        return succeeded(self.kind, plan.name, action, message)

    def _existing_devices(
        self,
        name: str,
        devices: list[str],
        results: list[ItemResult],
    ) -> list[str]:
        """Keep the devices present on this node, reporting the others."""
        existing: list[str] = []
        for device in dict.fromkeys(devices):
            if self.context.mounter.file_exists(device):
                existing.append(device)
                continue
            error = DeviceNotExistsError(device)
            logger.warning("Volume group %s: %s", name, error)
            self.context.events.record_event(EventType.NORMAL, REASON_DEVICE_NOT_EXISTS, str(error))
            results.append(recoverable(self.kind, name, str(error)))
        return existing
