"""LVM command wrapper.

Lists physical volumes, volume groups and logical volumes, and creates or
extends volume groups. There is no removal counterpart.
"""

import logging

from noderesource.host.base import HostTool
from noderesource.models.lvm import LogicalVolume, PhysicalVolume, VolumeGroup
from noderesource.parsers.lvm import (
    LV_COLUMNS,
    PV_COLUMNS,
    SEPARATOR,
    VG_COLUMNS,
    iter_rows,
    parse_lv,
    parse_pv,
    parse_vg,
)

logger = logging.getLogger(__name__)

_REPORT_OPTIONS = [
    "--units=b",
    f"--separator={SEPARATOR}",
    "--nosuffix",
    "--noheadings",
    "--nameprefixes",
    "-a",
]


class LvmTool(HostTool):
    """Wrapper around pvs/vgs/lvs and vgcreate/vgextend.

    Listing methods raise MalformedRecordError when a row cannot be parsed
    and CommandError when the command itself fails.
    """

    def list_physical_volumes(self) -> list[PhysicalVolume]:
        """List physical volumes that belong to a volume group.

        PVs without a name or without a group are left out.

        Returns:
            Assigned physical volumes.
        """
        result = self._run_checked(["pvs", *_REPORT_OPTIONS, "-o", PV_COLUMNS])
        pvs: list[PhysicalVolume] = []
        for line in iter_rows(result.stdout):
            pv = parse_pv(line)
            if pv.name and pv.vg_name:
                pvs.append(pv)
        return pvs

    def list_volume_groups(self) -> list[VolumeGroup]:
        """List all volume groups."""
        result = self._run_checked(["vgs", *_REPORT_OPTIONS, "-o", VG_COLUMNS])
        return [parse_vg(line) for line in iter_rows(result.stdout)]

    def list_logical_volumes(self, selection: str | None = None) -> list[LogicalVolume]:
        """List logical volumes.

        Args:
            selection: Optional 'vg' or 'vg/lv' to restrict the listing.

        Returns:
            Parsed logical volumes.
        """
        args = ["lvs", *_REPORT_OPTIONS, "-o", LV_COLUMNS]
        if selection:
            args.append(selection)
        result = self._run_checked(args)
        return [
            parse_lv(line) for line in iter_rows(result.stdout) if "LVM2_LV_NAME" in line
        ]

    def volume_group_members(self) -> dict[str, list[str]]:
        """Map each volume group name to its physical volume names.

        Returns:
            Membership in listing order.
        """
        members: dict[str, list[str]] = {}
        for pv in self.list_physical_volumes():
            members.setdefault(pv.vg_name, []).append(pv.name)
        return members

    def create_volume_group(self, name: str, physical_volumes: list[str], tags: list[str]) -> str:
        """Create a volume group.

        Args:
            name: Volume group name.
            physical_volumes: Devices to create the group from.
            tags: Tags to add to the group.

        Returns:
            Command output.

        Raises:
            ValueError: If no physical volume is given.
            CommandError: If vgcreate fails.
        """
        if not physical_volumes:
            msg = f"Cannot create volume group {name} without physical volumes"
            raise ValueError(msg)
        args = ["vgcreate", name, *physical_volumes, "-v"]
        for tag in tags:
            args.extend(["--add-tag", tag])
        return self._mutate(args).output

    def extend_volume_group(self, name: str, physical_volumes: list[str]) -> str:
        """Add physical volumes to an existing volume group.

        Raises:
            ValueError: If no physical volume is given.
            CommandError: If vgextend fails.
        """
        if not physical_volumes:
            msg = f"Cannot extend volume group {name} without physical volumes"
            raise ValueError(msg)
        return self._mutate(["vgextend", name, *physical_volumes, "-v"]).output
