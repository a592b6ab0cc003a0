"""Rule models for declarative storage configuration.

This module defines the Pydantic models representing one entry of a
rule document (volumegroup.toml, quotapath.toml or memory.toml).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class SelectorOperator(str, Enum):
    """Label selector operators supported by rules."""

    IN = "In"
    NOT_IN = "NotIn"
    EXISTS = "Exists"
    DOES_NOT_EXIST = "DoesNotExist"


class TopologyType(str, Enum):
    """Topology types understood by at least one reconciler."""

    DEVICE = "device"
    LOCAL_DISK = "local-disk"
    ALIBABACLOUD_LOCAL_DISK = "alibabacloud-local-disk"
    PVC = "pvc"
    PMEM = "pmem"


class Topology(BaseModel):
    """Backing storage description of a rule.

    Attributes:
        type: Topology type (device, local-disk, pmem, ...).
        devices: Candidate block device paths.
        regions: Persistent-memory region names.
        fstype: Filesystem type for quota paths.
        options: Mount options for quota paths.
        volumes: Free-form volume descriptions, carried through unchanged.
    """

    model_config = ConfigDict(extra="forbid")

    type: Annotated[str, Field(description="Topology type")] = ""
    devices: Annotated[list[str], Field(default_factory=list, description="Block devices")]
    regions: Annotated[list[str], Field(default_factory=list, description="Pmem regions")]
    fstype: Annotated[str, Field(description="Filesystem type")] = ""
    options: Annotated[str, Field(description="Mount options")] = ""
    volumes: Annotated[
        list[dict[str, str]],
        Field(default_factory=list, description="Volume descriptions"),
    ]


@dataclass(frozen=True, slots=True)
class Selector:
    """Node selector of a rule.

    Attributes:
        key: Label key.
        operator: Operator name; unknown operators are kept verbatim.
        value: Label value, ignored by Exists/DoesNotExist.
    """

    key: str
    operator: str
    value: str


class ResourceRule(BaseModel):
    """One declarative resource entry.

    The selector fields are flat in the document; ``selector`` groups them.
    The operator is kept as a plain string so that one rule with an unknown
    operator fails to match instead of invalidating the whole document.

    Attributes:
        name: Volume group name, mount path or memory entry identifier.
        key: Selector label key.
        operator: Selector operator (In, NotIn, Exists, DoesNotExist).
        value: Selector label value.
        topology: Backing storage description.
    """

    model_config = ConfigDict(extra="forbid")

    name: Annotated[str, Field(description="Resource identifier")] = ""
    key: Annotated[str, Field(description="Selector label key")] = ""
    operator: Annotated[str, Field(description="Selector operator")] = ""
    value: Annotated[str, Field(description="Selector label value")] = ""
    topology: Annotated[Topology, Field(default_factory=Topology, description="Topology")]

    @property
    def selector(self) -> Selector:
        """Return the node selector of this rule."""
        return Selector(key=self.key, operator=self.operator, value=self.value)
