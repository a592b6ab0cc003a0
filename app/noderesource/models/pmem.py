"""Persistent-memory models.

Pydantic models for the JSON printed by ``ndctl list -RN`` and
``daxctl list``. Unknown keys are ignored since both tools add fields
between releases.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class NamespaceMode(str, Enum):
    """Namespace modes the agent requests.

    Attributes:
        FSDAX: Block device (/dev/pmemN) used for volume groups and quota paths.
        DEVDAX: Character device (/dev/daxN.M) used for memory tiering.
    """

    FSDAX = "fsdax"
    DEVDAX = "devdax"


# daxctl mode of a device onlined as system memory
SYSTEM_RAM_MODE = "system-ram"


class PmemNamespace(BaseModel):
    """One namespace carved out of a region."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    dev: str = ""
    mode: str = ""
    map_type: Annotated[str, Field(alias="map")] = ""
    size: int = 0
    uuid: str = ""
    sector_size: Annotated[int, Field(alias="sectorsize")] = 0
    align: int = 0
    blockdev: str = ""
    chardev: str = ""
    name: str = ""


class PmemRegion(BaseModel):
    """A persistent-memory region and its namespaces."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    dev: str
    size: int = 0
    available_size: int = 0
    max_available_extent: int = 0
    region_type: Annotated[str, Field(alias="type")] = ""
    iset_id: int = 0
    persistence_domain: str = ""
    namespaces: Annotated[list[PmemNamespace], Field(default_factory=list)]


class PmemRegions(BaseModel):
    """Top-level ``ndctl list -RN`` document."""

    model_config = ConfigDict(extra="ignore")

    regions: Annotated[list[PmemRegion], Field(default_factory=list)]

    def get(self, dev: str) -> PmemRegion | None:
        """Return the region named ``dev``, or None."""
        for region in self.regions:
            if region.dev == dev:
                return region
        return None

    @property
    def names(self) -> set[str]:
        """Names of all listed regions."""
        return {region.dev for region in self.regions}


class DaxDevice(BaseModel):
    """One entry of ``daxctl list``."""

    model_config = ConfigDict(extra="ignore")

    chardev: str
    size: int = 0
    target_node: int = 0
    mode: str = ""
    movable: bool = False

    @property
    def is_system_ram(self) -> bool:
        """Check if the device is onlined as system memory."""
        return self.mode == SYSTEM_RAM_MODE
