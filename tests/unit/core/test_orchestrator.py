"""Unit tests for the reconciliation orchestrator."""

import threading
from collections.abc import Mapping
from pathlib import Path

import pytest
from fakes import FakeLvm, FakeMounter, write_rules

from noderesource.core.agent import get_reconcilers
from noderesource.core.context import AgentContext
from noderesource.core.orchestrator import ReconciliationOrchestrator
from noderesource.models.result import (
    ActionType,
    ItemResult,
    ResourceKind,
    ResultStatus,
    succeeded,
)
from noderesource.models.rule import ResourceRule
from noderesource.reconcilers.base import Reconciler

VOLUMEGROUP_DOC = """
[[volumegroup]]
name = "vg0"
key = "bar"
operator = "In"
value = "foo"

[volumegroup.topology]
type = "device"
devices = ["/dev/vdb"]
"""

QUOTAPATH_DOC = """
[[quotapath]]
name = "/mnt/quota"
key = "bar"
operator = "In"
value = "foo"

[quotapath.topology]
type = "device"
devices = ["/dev/vdc"]
"""


class StubReconciler(Reconciler):
    """Reconciler with scripted behaviour."""

    def __init__(
        self,
        context: AgentContext,
        kind: ResourceKind,
        fail_in: str | None = None,
    ) -> None:
        super().__init__(context)
        self._kind = kind
        self._fail_in = fail_in
        self.seen_rules: list[ResourceRule] = []

    @property
    def kind(self) -> ResourceKind:
        return self._kind

    def analyse_desired_state(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ItemResult]:
        if self._fail_in == "analyse":
            raise RuntimeError("analyse exploded")
        self.seen_rules = self._matching(rules, node_labels)
        return []

    def apply_diff(self) -> list[ItemResult]:
        if self._fail_in == "apply":
            raise RuntimeError("apply exploded")
        return [succeeded(self._kind, rule.name, ActionType.NOOP) for rule in self.seen_rules]


class TestSweep:
    """Tests for ReconciliationOrchestrator.sweep."""

    def test_full_sweep(
        self,
        tmp_path: Path,
        context: AgentContext,
        mounter: FakeMounter,
        lvm: FakeLvm,
    ) -> None:
        """All kinds are reconciled from their documents."""
        mounter.existing.update({"/dev/vdb", "/dev/vdc"})
        write_rules(tmp_path, "volumegroup", VOLUMEGROUP_DOC)
        write_rules(tmp_path, "quotapath", QUOTAPATH_DOC)
        orchestrator = ReconciliationOrchestrator(get_reconcilers(context), {"bar": "foo"}, tmp_path)

        report = orchestrator.sweep()

        assert [(r.kind, r.item, r.action) for r in report.results] == [
            (ResourceKind.VOLUME_GROUP, "vg0", ActionType.CREATE_GROUP),
            (ResourceKind.QUOTA_PATH, "/mnt/quota", ActionType.FORMAT_AND_MOUNT),
        ]
        assert lvm.members == {"vg0": ["/dev/vdb"]}
        assert report.finished_at is not None

    def test_second_sweep_is_in_sync(
        self,
        tmp_path: Path,
        context: AgentContext,
        mounter: FakeMounter,
        lvm: FakeLvm,
    ) -> None:
        """Sweeping a converged node changes nothing."""
        mounter.existing.update({"/dev/vdb", "/dev/vdc"})
        write_rules(tmp_path, "volumegroup", VOLUMEGROUP_DOC)
        write_rules(tmp_path, "quotapath", QUOTAPATH_DOC)
        orchestrator = ReconciliationOrchestrator(get_reconcilers(context), {"bar": "foo"}, tmp_path)
        orchestrator.sweep()
        calls = list(lvm.calls)

        report = orchestrator.sweep()

        assert report.in_sync is True
        assert lvm.calls == calls
        assert len(mounter.mount_calls) == 1

    def test_non_matching_node(self, tmp_path: Path, context: AgentContext) -> None:
        """Rules for other nodes produce no results."""
        write_rules(tmp_path, "volumegroup", VOLUMEGROUP_DOC)
        orchestrator = ReconciliationOrchestrator(get_reconcilers(context), {"bar": "x"}, tmp_path)

        report = orchestrator.sweep()

        assert report.results == []
        assert report.in_sync is True

    def test_invalid_document_is_isolated(self, tmp_path: Path, context: AgentContext) -> None:
        """A broken document fails its kind only."""
        write_rules(tmp_path, "volumegroup", "not toml [")
        write_rules(tmp_path, "memory", '[[memory]]\nname = "m"\n')
        volume_groups = StubReconciler(context, ResourceKind.VOLUME_GROUP)
        memory = StubReconciler(context, ResourceKind.MEMORY)
        orchestrator = ReconciliationOrchestrator([volume_groups, memory], {}, tmp_path)

        report = orchestrator.sweep()

        assert len(report.failures) == 1
        failure = report.failures[0]
        assert failure.kind == ResourceKind.VOLUME_GROUP
        assert failure.item == "volumegroup"
        assert "Invalid TOML syntax" in (failure.error or "")

    @pytest.mark.parametrize(
        ("phase", "message"),
        [
            ("analyse", "Analysing desired state failed: analyse exploded"),
            ("apply", "Applying diff failed: apply exploded"),
        ],
    )
    def test_reconciler_exception_is_isolated(
        self,
        tmp_path: Path,
        context: AgentContext,
        phase: str,
        message: str,
    ) -> None:
        """An unexpected exception in one kind does not stop the others."""
        write_rules(tmp_path, "memory", '[[memory]]\nname = "m"\nkey = "a"\noperator = "Exists"\n')
        broken = StubReconciler(context, ResourceKind.VOLUME_GROUP, fail_in=phase)
        memory = StubReconciler(context, ResourceKind.MEMORY)
        orchestrator = ReconciliationOrchestrator([broken, memory], {"a": "1"}, tmp_path)

        report = orchestrator.sweep()

        assert [(r.kind, r.status) for r in report.results] == [
            (ResourceKind.VOLUME_GROUP, ResultStatus.FATAL),
            (ResourceKind.MEMORY, ResultStatus.SUCCESS),
        ]
        assert report.results[0].error == message


class TestRun:
    """Tests for ReconciliationOrchestrator.run."""

    def test_stops_when_event_is_set(self, tmp_path: Path, context: AgentContext) -> None:
        """A set stop event ends the loop after the running sweep."""
        stop_event = threading.Event()

        class StoppingReconciler(StubReconciler):
            def apply_diff(self) -> list[ItemResult]:
                stop_event.set()
                return []

        orchestrator = ReconciliationOrchestrator(
            [StoppingReconciler(context, ResourceKind.MEMORY)],
            {},
            tmp_path,
            interval=3600,
        )

        assert orchestrator.run(stop_event) == 1

    def test_does_not_start_when_already_stopped(
        self, tmp_path: Path, context: AgentContext
    ) -> None:
        """No sweep runs if shutdown was requested before start."""
        stop_event = threading.Event()
        stop_event.set()
        orchestrator = ReconciliationOrchestrator([], {}, tmp_path)

        assert orchestrator.run(stop_event) == 0
