"""In-memory stand-ins for the host collaborators.

Reconciler tests run against these instead of LVM, ndctl and mount.
"""

from pathlib import Path

from noderesource.core.errors import CommandError, NamespaceCountError
from noderesource.host.events import EventRecorder, EventType
from noderesource.models.pmem import NamespaceMode, PmemRegion, PmemRegions


class FakeMounter:
    """Mounter recording every call."""

    def __init__(self, existing: set[str] | None = None) -> None:
        self.existing = set(existing or ())
        self.mounted: set[str] = set()
        self.folders: list[str] = []
        self.mount_calls: list[tuple[str, str, str, list[str], str]] = []
        self.mount_error: Exception | None = None
        self.folder_error: Exception | None = None

    def file_exists(self, path: str) -> bool:
        return path in self.existing

    def ensure_folder(self, path: str) -> None:
        if self.folder_error is not None:
            raise self.folder_error
        self.folders.append(path)

    def is_mounted(self, target: str) -> bool:
        return target in self.mounted

    def format_and_mount(
        self,
        source: str,
        target: str,
        fstype: str,
        mkfs_options: list[str],
        mount_options: str,
    ) -> None:
        self.mount_calls.append((source, target, fstype, list(mkfs_options), mount_options))
        if self.mount_error is not None:
            raise self.mount_error
        self.mounted.add(target)


class FakeLvm:
    """LVM tool keeping volume group membership in a dict."""

    def __init__(self, members: dict[str, list[str]] | None = None) -> None:
        self.members = {name: list(pvs) for name, pvs in (members or {}).items()}
        self.calls: list[tuple[str, str, list[str]]] = []
        self.list_error: Exception | None = None
        self.fail_mutations = False

    def volume_group_members(self) -> dict[str, list[str]]:
        if self.list_error is not None:
            raise self.list_error
        return {name: list(pvs) for name, pvs in self.members.items()}

    def create_volume_group(self, name: str, physical_volumes: list[str], tags: list[str]) -> str:
        self.calls.append(("create", name, list(physical_volumes)))
        if self.fail_mutations:
            raise CommandError(["vgcreate", name, *physical_volumes], 5, "vgcreate failed")
        self.members[name] = list(physical_volumes)
        return ""

    def extend_volume_group(self, name: str, physical_volumes: list[str]) -> str:
        self.calls.append(("extend", name, list(physical_volumes)))
        if self.fail_mutations:
            raise CommandError(["vgextend", name, *physical_volumes], 5, "vgextend failed")
        self.members[name].extend(physical_volumes)
        return ""


class FakePmemTool:
    """ndctl/daxctl tool driven by scripted resolution outcomes.

    ``resolutions`` maps a region to the outcomes of successive
    resolve_namespace_device_path calls; the last outcome repeats.
    An outcome is either a (device path, namespace) tuple or an exception.
    """

    def __init__(self, regions: list[str] | None = None) -> None:
        self.regions = PmemRegions(regions=[PmemRegion(dev=name) for name in regions or ()])
        self.resolutions: dict[str, list[tuple[str, str] | Exception]] = {}
        self.used: set[str] = set()
        self.tiered: set[str] = set()
        self.calls: list[tuple[str, ...]] = []
        self.list_error: Exception | None = None

    def list_regions(self) -> PmemRegions:
        self.calls.append(("list",))
        if self.list_error is not None:
            raise self.list_error
        return self.regions

    def resolve_namespace_device_path(self, region: str, mode: NamespaceMode) -> tuple[str, str]:
        self.calls.append(("resolve", region, mode.value))
        outcomes = self.resolutions.get(region) or [NamespaceCountError(region, 0)]
        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def create_namespace(self, region: str, mode: NamespaceMode) -> None:
        self.calls.append(("create", region, mode.value))

    def check_namespace_used(self, device_path: str) -> bool:
        self.calls.append(("used", device_path))
        return device_path in self.used

    def is_memory_tiered(self, chardev: str) -> bool:
        self.calls.append(("tiered", chardev))
        return chardev in self.tiered

    def tier_to_memory(self, chardev: str) -> None:
        self.calls.append(("tier", chardev))
        self.tiered.add(chardev)


class FakeInventory:
    """Local disk inventory returning a fixed list."""

    def __init__(self, devices: list[str] | None = None) -> None:
        self.devices = list(devices or ())

    def list_devices(self) -> list[str]:
        return list(self.devices)


class RecordingEvents(EventRecorder):
    """Event recorder keeping (type, reason, message) tuples."""

    def __init__(self) -> None:
        self.events: list[tuple[EventType, str, str]] = []

    def record_event(self, event_type: EventType, reason: str, message: str) -> None:
        self.events.append((event_type, reason, message))


def write_rules(config_dir: Path, kind: str, content: str) -> Path:
    """Write a rule document for ``kind`` into ``config_dir``."""
    path = config_dir / f"{kind}.toml"
    path.write_text(content)
    return path
