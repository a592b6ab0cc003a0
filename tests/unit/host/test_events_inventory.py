"""Unit tests for event recording and the local disk inventory."""

import logging

import pytest
from fakes import FakeMounter

from noderesource.host.events import REASON_DEVICE_NOT_EXISTS, EventType, LoggingEventRecorder
from noderesource.host.inventory import LocalDiskInventory


class TestLoggingEventRecorder:
    """Tests for LoggingEventRecorder."""

    def test_records_and_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        """Events are kept and logged with their severity."""
        recorder = LoggingEventRecorder()

        with caplog.at_level(logging.INFO, logger="noderesource.host.events"):
            recorder.record_event(EventType.NORMAL, REASON_DEVICE_NOT_EXISTS, "gone")
            recorder.record_event(EventType.WARNING, "ExistsFormatErr", "xfs")

        assert [(e.type, e.reason) for e in recorder.events] == [
            (EventType.NORMAL, "DeviceNotExists"),
            (EventType.WARNING, "ExistsFormatErr"),
        ]
        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.WARNING]

    def test_history_is_bounded(self) -> None:
        """Only the most recent events are kept."""
        recorder = LoggingEventRecorder(max_events=2)

        for index in range(3):
            recorder.record_event(EventType.NORMAL, "Test", str(index))

        assert [e.message for e in recorder.events] == ["1", "2"]


class TestLocalDiskInventory:
    """Tests for LocalDiskInventory."""

    def test_lists_data_disks(self) -> None:
        """Data disks start at vdb."""
        inventory = LocalDiskInventory(FakeMounter({"/dev/vdb"}), disk_count=3)

        assert inventory.list_devices() == ["/dev/vdb", "/dev/vdc", "/dev/vdd"]

    def test_no_disks_configured(self) -> None:
        """A count below one yields nothing."""
        assert LocalDiskInventory(FakeMounter({"/dev/vdb"}), disk_count=0).list_devices() == []

    def test_first_disk_missing(self) -> None:
        """Nothing is listed when the first data disk is absent."""
        assert LocalDiskInventory(FakeMounter(), disk_count=2).list_devices() == []
