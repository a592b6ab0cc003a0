"""LVM record models.

Typed records for the rows printed by ``pvs``, ``vgs`` and ``lvs``, and the
enumerations behind the ten-character ``lv_attr`` field. Character values
follow lvs(8). Characters a newer LVM prints that are not listed here
decode to unrecognized codes that keep the original character.
"""

from dataclasses import dataclass, field
from enum import Enum

# Member name of codes decoded from undocumented characters
UNRECOGNIZED = "UNRECOGNIZED"


class LVAttributeCode(str, Enum):
    """Base for the per-position lv_attr enumerations."""

    @classmethod
    def _missing_(cls, value: object) -> "LVAttributeCode | None":
        if not isinstance(value, str) or len(value) != 1:
            return None
        code = str.__new__(cls, value)
        code._name_ = UNRECOGNIZED
        code._value_ = value
        return code

    @property
    def recognized(self) -> bool:
        """Check if the character is one lvs(8) documents for this position."""
        return self._name_ != UNRECOGNIZED


class VolumeType(LVAttributeCode):
    """lv_attr position 1: volume type."""

    NORMAL = "-"
    CACHE = "C"
    MIRRORED = "m"
    MIRRORED_WITHOUT_SYNC = "M"
    ORIGIN = "o"
    ORIGIN_WITH_MERGING_SNAPSHOT = "O"
    INTEGRITY = "g"
    RAID = "r"
    RAID_WITHOUT_SYNC = "R"
    SNAPSHOT = "s"
    MERGING_SNAPSHOT = "S"
    PVMOVE = "p"
    VIRTUAL = "v"
    RAID_IMAGE = "i"
    RAID_IMAGE_OUT_OF_SYNC = "I"
    MIRROR_LOG = "l"
    UNDER_CONVERSION = "c"
    THIN = "V"
    THIN_POOL = "t"
    THIN_POOL_DATA = "T"
    VDO_POOL = "d"
    VDO_POOL_DATA = "D"
    METADATA = "e"


class VolumePermissions(LVAttributeCode):
    """lv_attr position 2: permissions."""

    WRITEABLE = "w"
    READ_ONLY = "r"
    READ_ONLY_ACTIVATION = "R"
    UNKNOWN = "-"


class VolumeAllocation(LVAttributeCode):
    """lv_attr position 3: allocation policy (capitals are locked)."""

    ANYWHERE = "a"
    CONTIGUOUS = "c"
    INHERITED = "i"
    CLING = "l"
    NORMAL = "n"
    ANYWHERE_LOCKED = "A"
    CONTIGUOUS_LOCKED = "C"
    INHERITED_LOCKED = "I"
    CLING_LOCKED = "L"
    NORMAL_LOCKED = "N"


class VolumeFixedMinor(LVAttributeCode):
    """lv_attr position 4: fixed minor number."""

    ENABLED = "m"
    DISABLED = "-"


class VolumeState(LVAttributeCode):
    """lv_attr position 5: state."""

    ACTIVE = "a"
    INACTIVE = "-"
    HISTORICAL = "h"
    SUSPENDED = "s"
    INVALID_SNAPSHOT = "I"
    INVALID_SUSPENDED_SNAPSHOT = "S"
    SNAPSHOT_MERGE_FAILED = "m"
    SUSPENDED_SNAPSHOT_MERGE_FAILED = "M"
    MAPPED_DEVICE_PRESENT_WITHOUT_TABLES = "d"
    MAPPED_DEVICE_PRESENT_WITH_INACTIVE_TABLE = "i"
    THIN_POOL_CHECK_NEEDED = "c"
    UNKNOWN = "X"


class VolumeOpen(LVAttributeCode):
    """lv_attr position 6: device open."""

    OPEN = "o"
    NOT_OPEN = "-"
    UNKNOWN = "X"


class VolumeTargetType(LVAttributeCode):
    """lv_attr position 7: target type."""

    NONE = "-"
    CACHE = "C"
    MIRROR = "m"
    RAID = "r"
    SNAPSHOT = "s"
    THIN = "t"
    UNKNOWN = "u"
    VIRTUAL = "v"
    VDO = "d"


class VolumeZeroing(LVAttributeCode):
    """lv_attr position 8: newly-allocated data blocks are zeroed."""

    ZEROING = "z"
    NON_ZEROING = "-"


class VolumeHealth(LVAttributeCode):
    """lv_attr position 9: volume health."""

    OK = "-"
    PARTIAL = "p"
    REFRESH_NEEDED = "r"
    MISMATCHES_EXIST = "m"
    WRITEMOSTLY = "w"
    RESHAPING = "s"
    REMOVE_AFTER_RESHAPE = "R"
    FAILED = "F"
    OUT_OF_DATA_SPACE = "D"
    METADATA_READ_ONLY = "M"
    ERROR = "E"
    UNKNOWN = "X"


class VolumeActivationSkipped(LVAttributeCode):
    """lv_attr position 10: skip activation."""

    SKIPPED = "k"
    NOT_SKIPPED = "-"


@dataclass(frozen=True, slots=True)
class LVAttributes:
    """Decoded ten-character lv_attr field.

    Each position maps to exactly one property; no cross-field validation
    is performed.
    """

    type: VolumeType
    permissions: VolumePermissions
    allocation: VolumeAllocation
    fixed_minor: VolumeFixedMinor
    state: VolumeState
    open: VolumeOpen
    target_type: VolumeTargetType
    zeroing: VolumeZeroing
    health: VolumeHealth
    activation_skipped: VolumeActivationSkipped

    @property
    def is_fixed_minor(self) -> bool:
        """Check if the volume uses a fixed minor number."""
        return self.fixed_minor == VolumeFixedMinor.ENABLED

    @property
    def is_activation_skipped(self) -> bool:
        """Check if the volume is flagged to skip activation."""
        return self.activation_skipped == VolumeActivationSkipped.SKIPPED

    def encode(self) -> str:
        """Return the ten-character lv_attr string."""
        return "".join(
            (
                self.type.value,
                self.permissions.value,
                self.allocation.value,
                self.fixed_minor.value,
                self.state.value,
                self.open.value,
                self.target_type.value,
                self.zeroing.value,
                self.health.value,
                self.activation_skipped.value,
            )
        )


@dataclass(frozen=True, slots=True)
class PhysicalVolume:
    """A block device registered with LVM.

    Attributes:
        name: Device path (e.g., '/dev/vdb').
        vg_name: Name of the owning volume group, empty if unassigned.
        size: Size in bytes.
        uuid: PV UUID.
    """

    name: str
    vg_name: str
    size: int
    uuid: str


@dataclass(frozen=True, slots=True)
class VolumeGroup:
    """An LVM volume group.

    Attributes:
        name: Volume group name.
        size: Total size in bytes.
        free_size: Unallocated size in bytes.
        uuid: VG UUID.
        tags: VG tags; empty when the group carries none.
    """

    name: str
    size: int
    free_size: int
    uuid: str
    tags: tuple[str, ...] = field(default=())


@dataclass(frozen=True, slots=True)
class LogicalVolume:
    """An LVM logical volume.

    Attributes:
        name: Logical volume name.
        size: Size in bytes.
        uuid: LV UUID.
        attributes: Decoded lv_attr field.
        copy_percent: Sync percentage for mirrors/raid, empty otherwise.
        kernel_major: Kernel device major number.
        kernel_minor: Kernel device minor number.
        tags: LV tags; empty when the volume carries none.
    """

    name: str
    size: int
    uuid: str
    attributes: LVAttributes
    copy_percent: str
    kernel_major: int
    kernel_minor: int
    tags: tuple[str, ...] = field(default=())
