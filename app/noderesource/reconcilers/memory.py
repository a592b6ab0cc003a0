"""Memory tiering reconciler.

Onlines a persistent-memory region as system memory through a devdax
namespace.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from noderesource.core.context import AgentContext
from noderesource.core.errors import ConfigurationError, ReconcileError
from noderesource.models.pmem import NamespaceMode
from noderesource.models.result import (
    ActionType,
    ItemResult,
    ResourceKind,
    fatal,
    recoverable,
    succeeded,
)
from noderesource.models.rule import ResourceRule
from noderesource.reconcilers.base import Reconciler

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MemorySpec:
    """Desired memory tier.

    Attributes:
        region: Region to online as memory.
        type: Topology type from the rule.
    """

    region: str
    type: str


class MemoryReconciler(Reconciler):
    """Reconciler for persistent memory onlined as system RAM."""

    def __init__(self, context: AgentContext) -> None:
        super().__init__(context)
        self.memories: list[MemorySpec] = []

    @property
    def kind(self) -> ResourceKind:
        """Return the memory kind."""
        return ResourceKind.MEMORY

    def analyse_desired_state(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ItemResult]:
        """Collect one entry per matching rule with exactly one region."""
        memories: list[MemorySpec] = []
        results: list[ItemResult] = []

        for rule in self._matching(rules, node_labels):
            regions = rule.topology.regions
            if len(regions) != 1:
                error = ConfigurationError(
                    f"Memory rule {rule.name or '<unnamed>'} must name exactly one region, "
                    f"got [{', '.join(regions)}]"
                )
                logger.error("%s", error)
                results.append(recoverable(self.kind, rule.name or "<unnamed>", str(error)))
                continue
            memories.append(MemorySpec(region=regions[0], type=rule.topology.type))

        self.memories = memories
        return results

    def apply_diff(self) -> list[ItemResult]:
        """Tier every desired region that is not tiered yet."""
        return [self._apply(memory) for memory in self.memories]

    def _apply(self, memory: MemorySpec) -> ItemResult:
        pmem = self.context.pmem
        try:
            resolved = pmem.ensure_namespace(memory.region, NamespaceMode.DEVDAX)
            converted = pmem.convert_to_memory_tier(resolved.device_name)
        except ReconcileError as e:
            logger.error("Memory region %s: %s", memory.region, e)
            return fatal(self.kind, memory.region, str(e), action=ActionType.TIER_MEMORY)

        if not converted:
            return succeeded(self.kind, memory.region, ActionType.NOOP)
        return succeeded(
            self.kind,
            memory.region,
            ActionType.TIER_MEMORY,
            f"Onlined {resolved.device_name} as system memory",
        )
