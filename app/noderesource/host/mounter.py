"""Filesystem formatting and mounting.

Mounts a device, formatting it first only when it carries no filesystem
at all. A device holding a different filesystem is never reformatted.
"""

import logging
import os
from pathlib import Path

from noderesource.core.errors import CommandError, ExistsFormatError
from noderesource.host.base import HostTool

logger = logging.getLogger(__name__)

DEFAULT_FSTYPE = "ext4"

# fsck exit codes (see fsck(8))
_FSCK_ERRORS_CORRECTED = 1
_FSCK_ERRORS_UNCORRECTED = 4

# Exit code when the executable cannot be found
_NOT_FOUND = 127

# blkid exit code when no signature was found
_BLKID_NOTHING_FOUND = 2

# Reported by get_disk_format for a partitioned device
PARTITIONED_FORMAT = "unknown data, probably partitions"


class Mounter(HostTool):
    """Folder, format and mount primitives.

    Attributes:
        mounts_file: Mount table consulted by is_mounted.
    """

    def __init__(
        self,
        dry_run: bool = False,
        host_namespace: bool = False,
        timeout: float | None = None,
        mounts_file: Path | None = None,
    ) -> None:
        """Initialize the mounter.

        Args:
            dry_run: If True, only simulate mutating commands.
            host_namespace: If True, run commands in the host namespaces.
            timeout: Per-command timeout in seconds.
            mounts_file: Mount table to read. Defaults to the mount table of
                PID 1 when running in the host namespaces, /proc/mounts otherwise.
        """
        super().__init__(dry_run=dry_run, host_namespace=host_namespace, timeout=timeout)
        if mounts_file is None:
            mounts_file = Path("/proc/1/mounts" if host_namespace else "/proc/mounts")
        self.mounts_file = mounts_file

    def file_exists(self, path: str) -> bool:
        """Check whether a path exists.

        Errors other than the path being absent count as existing.
        """
        try:
            os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError:
            return True
        return True

    def ensure_folder(self, path: str) -> None:
        """Create a directory and its parents.

        Raises:
            CommandError: If mkdir fails.
        """
        self._mutate(["mkdir", "-p", path])

    def is_mounted(self, target: str) -> bool:
        """Check whether something is mounted at ``target``.

        Raises:
            ValueError: If no target is given.
            OSError: If the mount table cannot be read.
        """
        if not target:
            msg = "Target is not specified for checking the mount"
            raise ValueError(msg)
        wanted = target.rstrip("/") or "/"
        for line in self.mounts_file.read_text().splitlines():
            fields = line.split()
            if len(fields) >= 2 and fields[1] == wanted:
                return True
        return False

    def get_disk_format(self, device: str) -> str:
        """Return the filesystem on a device, or an empty string if blank.

        Raises:
            CommandError: If blkid fails for a reason other than finding nothing.
        """
        args = ["blkid", "-p", "-s", "TYPE", "-s", "PTTYPE", "-o", "export", device]
        result = self._run(args)
        if result.returncode == _BLKID_NOTHING_FOUND:
            return ""
        if not result.success:
            raise CommandError(args, result.returncode, result.output)

        fstype = ""
        pttype = ""
        for line in result.stdout.splitlines():
            key, sep, value = line.strip().partition("=")
            if not sep:
                continue
            if key == "TYPE":
                fstype = value
            elif key == "PTTYPE":
                pttype = value

        if pttype:
            logger.info("Device %s has partition table type %s", device, pttype)
            return PARTITIONED_FORMAT
        return fstype

    def format_and_mount(
        self,
        source: str,
        target: str,
        fstype: str,
        mkfs_options: list[str],
        mount_options: str,
    ) -> None:
        """Mount a device, formatting it first if it is blank.

        The device is checked with ``fsck -a`` before mounting. If the mount
        fails and the device carries no filesystem it is formatted and the
        mount retried. For ext3/ext4, ``mkfs_options`` replace the default
        ``-F -m0`` arguments.

        Args:
            source: Device to mount.
            target: Mount point.
            fstype: Filesystem type; ext4 when empty.
            mkfs_options: Extra arguments for mkfs.
            mount_options: Comma-separated mount options, may be empty.

        Raises:
            ExistsFormatError: If the device already holds another filesystem.
            CommandError: If fsck finds uncorrectable errors, or mkfs or mount fail.
        """
        if self.dry_run:
            logger.info(
                "[dry-run] Would format (if blank) and mount %s at %s as %s",
                source,
                target,
                fstype or DEFAULT_FSTYPE,
            )
            return

        self._fsck(source)

        mount_args = ["mount"]
        if mount_options:
            mount_args.extend(["-o", mount_options])
        mount_args.extend([source, target])

        logger.info("Mounting %s at %s", source, target)
        mounted = self._run(mount_args)
        if mounted.success:
            return
        mount_error = CommandError(mount_args, mounted.returncode, mounted.output)

        existing_format = self.get_disk_format(source)
        if not existing_format:
            fstype = fstype or DEFAULT_FSTYPE
            self._mkfs(source, fstype, mkfs_options)
            self._run_checked(mount_args)
            return

        if not fstype or fstype == existing_format:
            raise mount_error
        raise ExistsFormatError(fstype, existing_format, str(mount_error))

    def _fsck(self, source: str) -> None:
        """Run ``fsck -a`` and interpret its exit code.

        Raises:
            CommandError: If fsck found errors it could not correct.
        """
        args = ["fsck", "-a", source]
        result = self._run(args)
        if result.success:
            return
        if result.returncode == _NOT_FOUND:
            logger.warning("'fsck' not found on system; continuing mount without running 'fsck'")
        elif result.returncode == _FSCK_ERRORS_CORRECTED:
            logger.info("Device %s has errors which were corrected by fsck", source)
        elif result.returncode == _FSCK_ERRORS_UNCORRECTED:
            raise CommandError(args, result.returncode, result.output)
        else:
            logger.debug("fsck on %s exited with %d: %s", source, result.returncode, result.output)

    def _mkfs(self, source: str, fstype: str, mkfs_options: list[str]) -> None:
        """Create a filesystem on a blank device.

        Raises:
            CommandError: If mkfs fails.
        """
        args = [source]
        if fstype in ("ext3", "ext4"):
            args = [*mkfs_options, source] if mkfs_options else ["-F", "-m0", source]

        logger.info(
            "Disk %s appears to be unformatted, formatting as %s with options: %s",
            source,
            fstype,
            " ".join(args),
        )
        try:
            self._run_checked([f"mkfs.{fstype}", *args])
        except CommandError:
            logger.error("Format of disk %s as %s failed", source, fstype)
            raise
