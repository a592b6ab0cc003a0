"""Abstract base class for resource reconcilers.

Every resource kind is converged in two phases: the desired state is
computed from the rules that match this node, then compared with the
host and corrected.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from noderesource.core.context import AgentContext
from noderesource.core.selector import selector_matches
from noderesource.models.result import ItemResult, ResourceKind
from noderesource.models.rule import ResourceRule


class Reconciler(ABC):
    """Abstract base class for all resource reconcilers.

    ``analyse_desired_state`` replaces the desired state wholesale on every
    call. ``apply_diff`` re-queries the host every time and never removes
    anything.

    Example:
        >>> reconciler = QuotaPathReconciler(context)
        >>> reconciler.analyse_desired_state(rules, {"bar": "foo"})
        >>> for result in reconciler.apply_diff():
        ...     print(f"{result.item}: {result.status.value}")
    """

    def __init__(self, context: AgentContext) -> None:
        """Initialize the reconciler.

        Args:
            context: Shared host collaborators.
        """
        self._context = context

    @property
    def context(self) -> AgentContext:
        """Return the shared collaborators."""
        return self._context

    @property
    @abstractmethod
    def kind(self) -> ResourceKind:
        """Return the resource kind this reconciler handles."""

    @abstractmethod
    def analyse_desired_state(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ItemResult]:
        """Compute the desired state from the rules matching this node.

        Args:
            rules: All rules of this kind.
            node_labels: Labels of this node.

        Returns:
            Results for rules that were skipped or reported a condition.
        """

    @abstractmethod
    def apply_diff(self) -> list[ItemResult]:
        """Converge the host towards the desired state.

        Returns:
            One result per desired item, or a single kind-level failure when
            the actual state cannot be determined.
        """

    def _matching(
        self,
        rules: list[ResourceRule],
        node_labels: Mapping[str, str],
    ) -> list[ResourceRule]:
        """Return the rules whose selector matches this node."""
        return [rule for rule in rules if selector_matches(rule.selector, node_labels)]
