"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import pytest
from fakes import FakeInventory, FakeLvm, FakeMounter, FakePmemTool, RecordingEvents

from noderesource.core.context import AgentContext
from noderesource.core.pmem import PmemLifecycle


@pytest.fixture
def mounter() -> FakeMounter:
    """Mounter where no device exists yet."""
    return FakeMounter()


@pytest.fixture
def lvm() -> FakeLvm:
    """LVM without any volume group."""
    return FakeLvm()


@pytest.fixture
def pmem_tool() -> FakePmemTool:
    """Pmem tool without regions."""
    return FakePmemTool()


@pytest.fixture
def inventory() -> FakeInventory:
    """Inventory without local disks."""
    return FakeInventory()


@pytest.fixture
def events() -> RecordingEvents:
    """Event recorder."""
    return RecordingEvents()


@pytest.fixture
def context(
    mounter: FakeMounter,
    lvm: FakeLvm,
    pmem_tool: FakePmemTool,
    events: RecordingEvents,
    inventory: FakeInventory,
) -> AgentContext:
    """Context wired to the fakes."""
    return AgentContext(
        mounter=mounter,
        lvm=lvm,
        pmem=PmemLifecycle(pmem_tool),
        events=events,
        inventory=inventory,
    )


@pytest.fixture
def lvs_output() -> str:
    """Sample ``lvs --nameprefixes`` output with a leading warning."""
    return (
        "  WARNING: Not using device /dev/vdz for PV abc.\n"
        "  LVM2_LV_NAME='data'<:SEP:>LVM2_LV_SIZE='1073741824'<:SEP:>LVM2_LV_UUID='lv-uuid-1'"
        "<:SEP:>LVM2_LV_ATTR='-wi-a-----'<:SEP:>LVM2_COPY_PERCENT=''<:SEP:>"
        "LVM2_LV_KERNEL_MAJOR='253'<:SEP:>LVM2_LV_KERNEL_MINOR='0'<:SEP:>LVM2_LV_TAGS=''\n"
        "  LVM2_LV_NAME='logs'<:SEP:>LVM2_LV_SIZE='536870912'<:SEP:>LVM2_LV_UUID='lv-uuid-2'"
        "<:SEP:>LVM2_LV_ATTR='-wi-ao---k'<:SEP:>LVM2_COPY_PERCENT=''<:SEP:>"
        "LVM2_LV_KERNEL_MAJOR='253'<:SEP:>LVM2_LV_KERNEL_MINOR='1'<:SEP:>LVM2_LV_TAGS='a,b'\n"
    )


@pytest.fixture
def vgs_output() -> str:
    """Sample ``vgs --nameprefixes`` output."""
    return (
        "  LVM2_VG_NAME='vg0'<:SEP:>LVM2_VG_SIZE='2147483648'<:SEP:>LVM2_VG_FREE='1073741824'"
        "<:SEP:>LVM2_VG_UUID='vg-uuid-0'<:SEP:>LVM2_VG_TAGS=''\n"
    )


@pytest.fixture
def pvs_output() -> str:
    """Sample ``pvs --nameprefixes`` output with one unassigned PV."""
    return (
        "  LVM2_VG_NAME='vg0'<:SEP:>LVM2_PV_NAME='/dev/vdb'<:SEP:>LVM2_PV_SIZE='1073741824'"
        "<:SEP:>LVM2_PV_UUID='pv-uuid-b'\n"
        "  LVM2_VG_NAME='vg0'<:SEP:>LVM2_PV_NAME='/dev/vdc'<:SEP:>LVM2_PV_SIZE='1073741824'"
        "<:SEP:>LVM2_PV_UUID='pv-uuid-c'\n"
        "  LVM2_VG_NAME=''<:SEP:>LVM2_PV_NAME='/dev/vdd'<:SEP:>LVM2_PV_SIZE='1073741824'"
        "<:SEP:>LVM2_PV_UUID='pv-uuid-d'\n"
    )
