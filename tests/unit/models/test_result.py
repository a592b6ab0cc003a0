"""Unit tests for result models."""

import pytest

from noderesource.models.result import (
    ActionType,
    ItemResult,
    ResourceKind,
    ResultStatus,
    SweepReport,
    fatal,
    recoverable,
    succeeded,
)


class TestItemResult:
    """Tests for ItemResult."""

    def test_empty_item_rejected(self) -> None:
        """An item identifier is required."""
        with pytest.raises(ValueError, match="Item identifier cannot be empty"):
            ItemResult(
                kind=ResourceKind.MEMORY,
                item="",
                status=ResultStatus.SUCCESS,
                action=ActionType.NOOP,
            )

    def test_helpers(self) -> None:
        """Helpers set status and action."""
        ok = succeeded(ResourceKind.QUOTA_PATH, "/mnt/a", ActionType.FORMAT_AND_MOUNT, "done")
        skipped = recoverable(ResourceKind.QUOTA_PATH, "/mnt/b", "no device")
        failed = fatal(ResourceKind.QUOTA_PATH, "/mnt/c", "boom", action=ActionType.FORMAT_AND_MOUNT)

        assert ok.success and not ok.failed and not ok.is_noop
        assert skipped.status == ResultStatus.RECOVERABLE
        assert skipped.action == ActionType.SKIP
        assert not skipped.success and not skipped.failed
        assert failed.failed
        assert failed.error == "boom"


class TestSweepReport:
    """Tests for SweepReport."""

    @pytest.fixture
    def report(self) -> SweepReport:
        """Report holding one result of each outcome."""
        report = SweepReport()
        report.extend(
            [
                succeeded(ResourceKind.VOLUME_GROUP, "vg0", ActionType.NOOP),
                succeeded(ResourceKind.VOLUME_GROUP, "vg1", ActionType.CREATE_GROUP, "created"),
                recoverable(ResourceKind.QUOTA_PATH, "/mnt/a", "missing"),
                fatal(ResourceKind.MEMORY, "region0", "failed"),
            ]
        )
        report.finish()
        return report

    def test_classification(self, report: SweepReport) -> None:
        """Results are split into actions, conditions and failures."""
        assert [r.item for r in report.actions] == ["vg1"]
        assert [r.item for r in report.conditions] == ["/mnt/a"]
        assert [r.item for r in report.failures] == ["region0"]
        assert report.in_sync is False

    def test_for_kind(self, report: SweepReport) -> None:
        """Results can be filtered by kind."""
        assert [r.item for r in report.for_kind(ResourceKind.VOLUME_GROUP)] == ["vg0", "vg1"]

    def test_in_sync_when_only_noops(self) -> None:
        """A report with only no-op successes is in sync."""
        report = SweepReport()
        report.extend([succeeded(ResourceKind.VOLUME_GROUP, "vg0", ActionType.NOOP)])

        assert report.in_sync is True

    def test_to_dict(self, report: SweepReport) -> None:
        """to_dict carries a summary and omits unset fields."""
        data = report.to_dict()

        assert data["summary"] == {"total": 4, "actions": 1, "conditions": 1, "failures": 1}
        assert data["finished_at"] is not None
        results = data["results"]
        assert isinstance(results, list)
        assert results[0] == {
            "kind": "volumegroup",
            "item": "vg0",
            "status": "success",
            "action": "noop",
        }
        assert results[3]["error"] == "failed"
