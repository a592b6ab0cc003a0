"""Result models for reconciliation sweeps.

This module defines the per-item outcome of a reconciler and the report
collecting all outcomes of one sweep.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum


class ResourceKind(Enum):
    """Resource kinds managed by the agent."""

    VOLUME_GROUP = "volumegroup"
    QUOTA_PATH = "quotapath"
    MEMORY = "memory"


class ActionType(Enum):
    """Corrective action decided for one resource item.

    Attributes:
        CREATE_GROUP: Create a volume group from the full desired PV set.
        EXTEND_GROUP: Add exactly the missing PVs to an existing group.
        FORMAT_AND_MOUNT: Format (if blank) and mount a quota path.
        TIER_MEMORY: Online a devdax namespace as system memory.
        NOOP: Actual state already matches desired state.
        REFUSE: The diff would remove members; nothing was executed.
        SKIP: The item could not be processed this sweep.
    """

    CREATE_GROUP = "create-group"
    EXTEND_GROUP = "extend-group"
    FORMAT_AND_MOUNT = "format-and-mount"
    TIER_MEMORY = "tier-memory"
    NOOP = "noop"
    REFUSE = "refuse"
    SKIP = "skip"


class ResultStatus(Enum):
    """Outcome classification of one resource item.

    Attributes:
        SUCCESS: Action applied, or nothing to do.
        RECOVERABLE: Condition reported, item skipped, expected to resolve
            on its own (missing device, configuration problem).
        FATAL: Item failed for this sweep and needs attention.
    """

    SUCCESS = "success"
    RECOVERABLE = "recoverable"
    FATAL = "fatal"


@dataclass(frozen=True, slots=True)
class ItemResult:
    """Outcome of reconciling a single resource item.

    Attributes:
        kind: Resource kind the item belongs to.
        item: Item identifier (group name, mount path, region).
        status: Outcome classification.
        action: Action that was decided.
        message: Optional success message or additional information.
        error: Optional error message if the item did not succeed.
    """

    kind: ResourceKind
    item: str
    status: ResultStatus
    action: ActionType
    message: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        """Validate result data after initialization."""
        if not self.item:
            msg = "Item identifier cannot be empty"
            raise ValueError(msg)

    @property
    def success(self) -> bool:
        """Check if the item succeeded."""
        return self.status == ResultStatus.SUCCESS

    @property
    def failed(self) -> bool:
        """Check if the item failed fatally."""
        return self.status == ResultStatus.FATAL

    @property
    def is_noop(self) -> bool:
        """Check if nothing had to be done."""
        return self.action == ActionType.NOOP


def succeeded(
    kind: ResourceKind,
    item: str,
    action: ActionType,
    message: str | None = None,
) -> ItemResult:
    """Create a successful result."""
    return ItemResult(
        kind=kind,
        item=item,
        status=ResultStatus.SUCCESS,
        action=action,
        message=message,
    )


def recoverable(
    kind: ResourceKind,
    item: str,
    error: str,
    action: ActionType = ActionType.SKIP,
) -> ItemResult:
    """Create a result for a reported, non-fatal condition."""
    return ItemResult(
        kind=kind,
        item=item,
        status=ResultStatus.RECOVERABLE,
        action=action,
        error=error,
    )


def fatal(
    kind: ResourceKind,
    item: str,
    error: str,
    action: ActionType = ActionType.SKIP,
) -> ItemResult:
    """Create a result for an item that failed this sweep."""
    return ItemResult(
        kind=kind,
        item=item,
        status=ResultStatus.FATAL,
        action=action,
        error=error,
    )


@dataclass(slots=True)
class SweepReport:
    """All item results of one reconciliation sweep.

    Attributes:
        started_at: When the sweep started.
        finished_at: When the sweep finished, None while running.
        results: Item results in the order they were produced.
    """

    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None
    results: list[ItemResult] = field(default_factory=list)

    def extend(self, results: list[ItemResult]) -> None:
        """Append results produced by a reconciler phase."""
        self.results.extend(results)

    def finish(self) -> None:
        """Mark the sweep as finished."""
        self.finished_at = datetime.now(UTC)

    def for_kind(self, kind: ResourceKind) -> list[ItemResult]:
        """Return results of a single resource kind."""
        return [r for r in self.results if r.kind == kind]

    @property
    def failures(self) -> list[ItemResult]:
        """Results that failed fatally."""
        return [r for r in self.results if r.failed]

    @property
    def conditions(self) -> list[ItemResult]:
        """Results reporting a recoverable condition."""
        return [r for r in self.results if r.status == ResultStatus.RECOVERABLE]

    @property
    def actions(self) -> list[ItemResult]:
        """Successful results that changed host state."""
        return [r for r in self.results if r.success and not r.is_noop]

    @property
    def in_sync(self) -> bool:
        """Check if every item succeeded without changing anything."""
        return all(r.success and r.is_noop for r in self.results)

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "summary": {
                "total": len(self.results),
                "actions": len(self.actions),
                "conditions": len(self.conditions),
                "failures": len(self.failures),
            },
            "results": [_result_to_dict(r) for r in self.results],
        }


def _result_to_dict(result: ItemResult) -> dict[str, str]:
    """Convert an ItemResult to a dictionary with non-None fields."""
    data: dict[str, str] = {
        "kind": result.kind.value,
        "item": result.item,
        "status": result.status.value,
        "action": result.action.value,
    }
    if result.message is not None:
        data["message"] = result.message
    if result.error is not None:
        data["error"] = result.error
    return data
