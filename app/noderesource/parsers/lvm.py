"""Parser for LVM reporting output.

The listing commands are invoked with ``--nameprefixes --noheadings
--separator=<:SEP:>`` so that every row looks like::

    LVM2_VG_NAME='vg0'<:SEP:>LVM2_VG_SIZE='1073741824'<:SEP:>...

Each row holds a fixed number of components per record kind. Values are
always single-quoted; the quotes are stripped before use.
"""

import logging

from noderesource.core.errors import ReconcileError
from noderesource.models.lvm import (
    LogicalVolume,
    LVAttributes,
    PhysicalVolume,
    VolumeActivationSkipped,
    VolumeAllocation,
    VolumeFixedMinor,
    VolumeGroup,
    VolumeHealth,
    VolumeOpen,
    VolumePermissions,
    VolumeState,
    VolumeTargetType,
    VolumeType,
    VolumeZeroing,
)

logger = logging.getLogger(__name__)

SEPARATOR = "<:SEP:>"

LV_ARITY = 8
VG_ARITY = 5
PV_ARITY = 4

ATTRIBUTES_LENGTH = 10

# Column lists passed to -o, in the order the rows are printed.
LV_COLUMNS = "lv_name,lv_size,lv_uuid,lv_attr,copy_percent,lv_kernel_major,lv_kernel_minor,lv_tags"
VG_COLUMNS = "vg_name,vg_size,vg_free,vg_uuid,vg_tags"
PV_COLUMNS = "vg_name,pv_name,pv_size,pv_uuid"

_ATTRIBUTE_ENUMS = (
    VolumeType,
    VolumePermissions,
    VolumeAllocation,
    VolumeFixedMinor,
    VolumeState,
    VolumeOpen,
    VolumeTargetType,
    VolumeZeroing,
    VolumeHealth,
    VolumeActivationSkipped,
)


class MalformedRecordError(ReconcileError):
    """Raised when a row of LVM output cannot be decoded."""


def parse_fields(line: str, expected_arity: int) -> dict[str, str]:
    """Split one row into its key/value components.

    Args:
        line: Raw output row.
        expected_arity: Number of components this record kind carries.

    Returns:
        Mapping of prefixed column name (e.g., 'LVM2_LV_NAME') to unquoted value.

    Raises:
        MalformedRecordError: On arity mismatch, a component without '=',
            or a value that is not single-quoted.
    """
    components = line.strip().split(SEPARATOR)
    if len(components) != expected_arity:
        msg = f"expected {expected_arity} components, got {len(components)}"
        raise MalformedRecordError(msg)

    fields: dict[str, str] = {}
    for component in components:
        key, sep, value = component.partition("=")
        if not sep:
            msg = f"component {component!r} is not a key=value pair"
            raise MalformedRecordError(msg)
        if len(value) < 2 or value[0] != "'" or value[-1] != "'":
            msg = f"value of {key} is not single-quoted: {value!r}"
            raise MalformedRecordError(msg)
        fields[key] = value[1:-1]
    return fields


def parse_unsigned(value: str, field: str) -> int:
    """Parse an unsigned decimal integer.

    Args:
        value: Raw field value.
        field: Field name for the error message.

    Returns:
        The parsed integer.

    Raises:
        MalformedRecordError: If the value is not made of ASCII digits only.
    """
    if not value or not value.isascii() or not value.isdigit():
        msg = f"{field} is not an unsigned integer: {value!r}"
        raise MalformedRecordError(msg)
    return int(value)


def split_tags(value: str) -> tuple[str, ...]:
    """Split a comma-separated tag list.

    An empty string yields no tags at all.
    """
    if not value:
        return ()
    return tuple(value.split(","))


def parse_attributes(attr: str) -> LVAttributes:
    """Decode the ten-character lv_attr field.

    Args:
        attr: Attribute string, e.g. '-wi-a-----'.

    Returns:
        Decoded LVAttributes.

    Raises:
        MalformedRecordError: On a length other than 10.
    """
    if len(attr) != ATTRIBUTES_LENGTH:
        msg = f"incorrect attrs block size, expected {ATTRIBUTES_LENGTH}, got {len(attr)} in {attr!r}"
        raise MalformedRecordError(msg)

    decoded = [enum_type(char) for char, enum_type in zip(attr, _ATTRIBUTE_ENUMS, strict=True)]
    for position, code in enumerate(decoded, start=1):
        if not code.recognized:
            logger.debug(
                "Unrecognized %s %r at position %d in %r",
                type(code).__name__,
                code.value,
                position,
                attr,
            )
    return LVAttributes(*decoded)


def parse_lv(line: str) -> LogicalVolume:
    """Parse one ``lvs`` row.

    Raises:
        MalformedRecordError: If the row cannot be decoded.
    """
    fields = parse_fields(line, LV_ARITY)
    try:
        return LogicalVolume(
            name=fields["LVM2_LV_NAME"],
            size=parse_unsigned(fields["LVM2_LV_SIZE"], "LVM2_LV_SIZE"),
            uuid=fields["LVM2_LV_UUID"],
            attributes=parse_attributes(fields["LVM2_LV_ATTR"]),
            copy_percent=fields["LVM2_COPY_PERCENT"],
            kernel_major=parse_unsigned(fields["LVM2_LV_KERNEL_MAJOR"], "LVM2_LV_KERNEL_MAJOR"),
            kernel_minor=parse_unsigned(fields["LVM2_LV_KERNEL_MINOR"], "LVM2_LV_KERNEL_MINOR"),
            tags=split_tags(fields["LVM2_LV_TAGS"]),
        )
    except KeyError as e:
        msg = f"missing column {e.args[0]} in logical volume row"
        raise MalformedRecordError(msg) from e


def parse_vg(line: str) -> VolumeGroup:
    """Parse one ``vgs`` row.

    Raises:
        MalformedRecordError: If the row cannot be decoded.
    """
    fields = parse_fields(line, VG_ARITY)
    try:
        return VolumeGroup(
            name=fields["LVM2_VG_NAME"],
            size=parse_unsigned(fields["LVM2_VG_SIZE"], "LVM2_VG_SIZE"),
            free_size=parse_unsigned(fields["LVM2_VG_FREE"], "LVM2_VG_FREE"),
            uuid=fields["LVM2_VG_UUID"],
            tags=split_tags(fields["LVM2_VG_TAGS"]),
        )
    except KeyError as e:
        msg = f"missing column {e.args[0]} in volume group row"
        raise MalformedRecordError(msg) from e


def parse_pv(line: str) -> PhysicalVolume:
    """Parse one ``pvs`` row.

    Raises:
        MalformedRecordError: If the row cannot be decoded.
    """
    fields = parse_fields(line, PV_ARITY)
    try:
        return PhysicalVolume(
            name=fields["LVM2_PV_NAME"],
            vg_name=fields["LVM2_VG_NAME"],
            size=parse_unsigned(fields["LVM2_PV_SIZE"], "LVM2_PV_SIZE"),
            uuid=fields["LVM2_PV_UUID"],
        )
    except KeyError as e:
        msg = f"missing column {e.args[0]} in physical volume row"
        raise MalformedRecordError(msg) from e


def iter_rows(output: str) -> list[str]:
    """Return the non-empty rows of a listing, skipping LVM warnings."""
    rows: list[str] = []
    for raw in output.splitlines():
        line = raw.strip()
        if not line:
            continue
        if line.startswith("WARNING"):
            logger.debug("Skipping LVM warning: %s", line)
            continue
        rows.append(line)
    return rows
