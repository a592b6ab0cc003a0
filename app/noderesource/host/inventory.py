"""Local disk inventory.

Enumerates the instance's local data disks for the ``local-disk``
topology. Data disks are attached as /dev/vdb, /dev/vdc, ... and the
number of disks comes from configuration.
"""

import logging
import string

from noderesource.host.mounter import Mounter

logger = logging.getLogger(__name__)

DEVICE_PREFIX = "/dev/vd"
# vda is the system disk
FIRST_DATA_DISK = "b"


class LocalDiskInventory:
    """Lists local data disks.

    Attributes:
        disk_count: Number of local data disks attached to the instance.
    """

    def __init__(self, mounter: Mounter, disk_count: int = 0) -> None:
        self._mounter = mounter
        self.disk_count = disk_count

    def list_devices(self) -> list[str]:
        """Return the local data disk paths.

        The list is empty when no disk is configured or when the first data
        disk is absent.
        """
        if self.disk_count < 1:
            logger.error("No local disk configured for local-disk topology")
            return []

        letters = string.ascii_lowercase[string.ascii_lowercase.index(FIRST_DATA_DISK) :]
        devices = [f"{DEVICE_PREFIX}{c}" for c in letters[: self.disk_count]]
        if not self._mounter.file_exists(devices[0]):
            logger.error("First local disk %s does not exist", devices[0])
            return []

        logger.info("Local disks: %s", ", ".join(devices))
        return devices
