"""Periodic reconciliation across all resource kinds.

Each sweep loads the rules of every kind, lets its reconciler compute the
desired state and then converge the host. A failure in one kind is
recorded and the sweep moves on to the next kind.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from noderesource.core.paths import get_rules_path
from noderesource.core.rules import RulesError, load_rules
from noderesource.core.settings import DEFAULT_INTERVAL
from noderesource.models.result import ItemResult, SweepReport, fatal

if TYPE_CHECKING:
    from noderesource.reconcilers.base import Reconciler

logger = logging.getLogger(__name__)


class ReconciliationOrchestrator:
    """Drives sweeps over an ordered list of reconcilers.

    Attributes:
        reconcilers: Reconcilers in the order they run.
        node_labels: Labels of this node.
        config_dir: Directory holding the rule documents.
        interval: Seconds to wait between sweeps.

    Example:
        >>> orchestrator = build_orchestrator(settings, node_labels)
        >>> report = orchestrator.sweep()
        >>> print(len(report.failures))
    """

    def __init__(
        self,
        reconcilers: list[Reconciler],
        node_labels: Mapping[str, str],
        config_dir: Path,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.reconcilers = list(reconcilers)
        self.node_labels = dict(node_labels)
        self.config_dir = config_dir
        self.interval = interval

    def sweep(self) -> SweepReport:
        """Run one pass over every reconciler.

        Returns:
            Report with the results of all kinds.
        """
        report = SweepReport()
        for reconciler in self.reconcilers:
            report.extend(self._reconcile(reconciler))
        report.finish()

        logger.info(
            "Sweep finished: %d items, %d actions, %d conditions, %d failures",
            len(report.results),
            len(report.actions),
            len(report.conditions),
            len(report.failures),
        )
        return report

    def run(self, stop_event: threading.Event) -> int:
        """Sweep until ``stop_event`` is set.

        The stop event is checked between sweeps only; a running sweep is
        always completed.

        Args:
            stop_event: Set to request shutdown.

        Returns:
            Number of completed sweeps.
        """
        logger.info("Starting reconciliation every %.0fs", self.interval)
        sweeps = 0
        while not stop_event.is_set():
            self.sweep()
            sweeps += 1
            if stop_event.wait(self.interval):
                break
        logger.info("Stopped reconciliation after %d sweeps", sweeps)
        return sweeps

    def _reconcile(self, reconciler: Reconciler) -> list[ItemResult]:
        """Load, analyse and apply one kind, isolating its failures."""
        kind = reconciler.kind
        path = get_rules_path(kind.value, self.config_dir)

        try:
            rules = load_rules(path, kind.value)
        except RulesError as e:
            logger.error("Cannot load %s rules: %s", kind.value, e)
            return [fatal(kind, kind.value, str(e))]

        results: list[ItemResult] = []
        try:
            results.extend(reconciler.analyse_desired_state(rules, self.node_labels))
        except Exception as e:
            logger.exception("Analysing %s failed", kind.value)
            results.append(fatal(kind, kind.value, f"Analysing desired state failed: {e}"))
            return results

        try:
            results.extend(reconciler.apply_diff())
        except Exception as e:
            logger.exception("Applying %s failed", kind.value)
            results.append(fatal(kind, kind.value, f"Applying diff failed: {e}"))
        return results
