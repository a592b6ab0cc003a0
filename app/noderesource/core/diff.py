"""Extend-only diff planning for volume groups.

This module compares the desired physical-volume set of a volume group
with the members it actually has and decides the single corrective action.
Members are only ever added; a plan that would drop a member is refused.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class PlanAction(Enum):
    """Action decided for one volume group.

    Attributes:
        CREATE: Group is absent; create it from the full desired set.
        EXTEND: Group lacks some desired members; add exactly those.
        NOOP: Every desired member is already present.
        REFUSE: Group has members that are not desired; nothing is done.
    """

    CREATE = "create"
    EXTEND = "extend"
    NOOP = "noop"
    REFUSE = "refuse"


@dataclass(frozen=True, slots=True)
class VolumeGroupPlan:
    """Planned change for one volume group.

    Attributes:
        name: Volume group name.
        action: Decided action.
        physical_volumes: PVs to create the group from or extend it with.
        reason: Explanation for a refusal.
    """

    name: str
    action: PlanAction
    physical_volumes: tuple[str, ...] = ()
    reason: str | None = None

    @property
    def changes_host(self) -> bool:
        """Check if executing the plan mutates the host."""
        return self.action in (PlanAction.CREATE, PlanAction.EXTEND)


def difference(a: Iterable[str], b: Iterable[str]) -> list[str]:
    """Return the elements of ``a`` that are not in ``b``.

    Order of ``a`` is preserved and duplicates are dropped.
    """
    exclude = set(b)
    seen: set[str] = set()
    result: list[str] = []
    for item in a:
        if item in exclude or item in seen:
            continue
        seen.add(item)
        result.append(item)
    return result


def plan_volume_group(
    name: str,
    desired: Iterable[str],
    actual: Iterable[str] | None,
) -> VolumeGroupPlan:
    """Decide how to converge one volume group.

    Args:
        name: Volume group name.
        desired: Desired physical volumes.
        actual: Current members, or None if the group does not exist.

    Returns:
        The plan for this group.
    """
    desired = list(dict.fromkeys(desired))

    if actual is None:
        return VolumeGroupPlan(name=name, action=PlanAction.CREATE, physical_volumes=tuple(desired))

    actual = list(actual)
    unexpected = difference(actual, desired)
    if unexpected:
        reason = (
            f"Volume group {name} has members not in the desired set "
            f"({', '.join(unexpected)}); removing members is not supported"
        )
        return VolumeGroupPlan(name=name, action=PlanAction.REFUSE, reason=reason)

    missing = difference(desired, actual)
    if not missing:
        return VolumeGroupPlan(name=name, action=PlanAction.NOOP)

    return VolumeGroupPlan(name=name, action=PlanAction.EXTEND, physical_volumes=tuple(missing))
