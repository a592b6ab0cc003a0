"""Unit tests for the persistent-memory lifecycle."""

import pytest
from fakes import FakePmemTool

from noderesource.core.errors import (
    NamespaceCountError,
    NamespaceModeError,
    RegionNotFoundError,
)
from noderesource.core.pmem import (
    PmemLifecycle,
    ResolvedNamespace,
    namespace_block_device,
    region_to_namespace,
)
from noderesource.models.pmem import NamespaceMode, PmemNamespace, PmemRegion, PmemRegions


class TestHelpers:
    """Tests for the naming helpers."""

    def test_region_to_namespace(self) -> None:
        """Region N maps to namespace N.0."""
        assert region_to_namespace("region0") == "namespace0.0"
        assert region_to_namespace("region12") == "namespace12.0"

    def test_namespace_block_device(self) -> None:
        """A namespace is found across regions by name."""
        regions = PmemRegions(
            regions=[
                PmemRegion(dev="region0"),
                PmemRegion(
                    dev="region1",
                    namespaces=[PmemNamespace(dev="namespace1.0", blockdev="pmem1")],
                ),
            ]
        )

        assert namespace_block_device("namespace1.0", regions) == "/dev/pmem1"
        assert namespace_block_device("namespace0.0", regions) is None

    def test_device_name(self) -> None:
        """device_name strips /dev/."""
        resolved = ResolvedNamespace("region0", "namespace0.0", "/dev/dax0.0")

        assert resolved.device_name == "dax0.0"


class TestEnsureNamespace:
    """Tests for PmemLifecycle.ensure_namespace."""

    @pytest.fixture
    def tool(self) -> FakePmemTool:
        """Tool with one region."""
        return FakePmemTool(regions=["region0"])

    def test_existing_namespace(self, tool: FakePmemTool) -> None:
        """A resolving region is returned without creating anything."""
        tool.resolutions["region0"] = [("/dev/pmem0", "namespace0.0")]

        resolved = PmemLifecycle(tool).ensure_namespace("region0", NamespaceMode.FSDAX)

        assert resolved == ResolvedNamespace("region0", "namespace0.0", "/dev/pmem0")
        assert ("create", "region0", "fsdax") not in tool.calls

    def test_creates_when_region_is_empty(self, tool: FakePmemTool) -> None:
        """A region without namespace gets one and is resolved again once."""
        tool.resolutions["region0"] = [
            NamespaceCountError("region0", 0),
            ("/dev/pmem0", "namespace0.0"),
        ]

        resolved = PmemLifecycle(tool).ensure_namespace("region0", NamespaceMode.FSDAX)

        assert resolved.created is True
        assert resolved.device_path == "/dev/pmem0"
        assert tool.calls == [
            ("resolve", "region0", "fsdax"),
            ("create", "region0", "fsdax"),
            ("resolve", "region0", "fsdax"),
        ]

    def test_create_then_still_unresolved(self, tool: FakePmemTool) -> None:
        """A second failed resolution propagates instead of looping."""
        tool.resolutions["region0"] = [NamespaceCountError("region0", 0)]

        with pytest.raises(NamespaceCountError):
            PmemLifecycle(tool).ensure_namespace("region0", NamespaceMode.DEVDAX)

        assert [c[0] for c in tool.calls] == ["resolve", "create", "resolve"]

    @pytest.mark.parametrize(
        "error",
        [
            NamespaceCountError("region0", 2),
            NamespaceModeError("region0", "devdax", "fsdax"),
            RegionNotFoundError("region0"),
        ],
    )
    def test_other_errors_are_not_repaired(self, tool: FakePmemTool, error: Exception) -> None:
        """Regions with several namespaces or a foreign mode are left alone."""
        tool.resolutions["region0"] = [error]

        with pytest.raises(type(error)):
            PmemLifecycle(tool).ensure_namespace("region0", NamespaceMode.FSDAX)

        assert all(c[0] != "create" for c in tool.calls)


class TestMemoryTier:
    """Tests for PmemLifecycle.convert_to_memory_tier."""

    def test_converts_once(self) -> None:
        """A device is reconfigured only if it is not system memory yet."""
        tool = FakePmemTool()
        lifecycle = PmemLifecycle(tool)

        assert lifecycle.convert_to_memory_tier("dax0.0") is True
        assert lifecycle.convert_to_memory_tier("dax0.0") is False
        assert tool.calls.count(("tier", "dax0.0")) == 1

    def test_check_in_use(self) -> None:
        """check_in_use delegates to the tool."""
        tool = FakePmemTool()
        tool.used.add("/dev/pmem0")
        lifecycle = PmemLifecycle(tool)

        assert lifecycle.check_in_use("/dev/pmem0") is True
        assert lifecycle.check_in_use("/dev/pmem1") is False
