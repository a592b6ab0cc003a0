"""Base class for host tool wrappers.

Every wrapper shells out through run_command and shares the same dry-run
and host-namespace handling.
"""

import logging
import subprocess

from noderesource.core.errors import CommandError
from noderesource.utils.shell import CommandResult, host_command, run_command

logger = logging.getLogger(__name__)

# Exit code reported for a command killed after its timeout
TIMEOUT_RETURNCODE = -1


class HostTool:
    """Common command execution for host storage tools.

    Queries always run. Mutations are only logged in dry-run mode.

    Attributes:
        dry_run: If True, mutating commands are reported but not executed.
        host_namespace: If True, commands enter the namespaces of PID 1.

    Example:
        >>> lvm = LvmTool(dry_run=True, host_namespace=True)
        >>> lvm.create_volume_group("vg0", ["/dev/vdb"], [])
    """

    # Default timeout for host tools
    _TIMEOUT: float = 120.0

    def __init__(
        self,
        dry_run: bool = False,
        host_namespace: bool = False,
        timeout: float | None = None,
    ) -> None:
        """Initialize the tool.

        Args:
            dry_run: If True, only simulate mutating commands.
            host_namespace: If True, run commands in the host namespaces.
            timeout: Per-command timeout in seconds.
        """
        self._dry_run = dry_run
        self._host_namespace = host_namespace
        self._timeout = timeout if timeout is not None else self._TIMEOUT

    @property
    def dry_run(self) -> bool:
        """Check if the tool is in dry-run mode."""
        return self._dry_run

    @property
    def host_namespace(self) -> bool:
        """Check if commands run in the host namespaces."""
        return self._host_namespace

    def _run(self, args: list[str]) -> CommandResult:
        """Run a command and return its result without checking the exit code.

        Raises:
            CommandError: If the command does not finish within the timeout.
        """
        argv = host_command(args, host_namespace=self._host_namespace)
        logger.debug("Running: %s", " ".join(argv))
        try:
            return run_command(argv, timeout=self._timeout)
        except FileNotFoundError as e:
            return CommandResult(stdout="", stderr=str(e), returncode=127)
        except subprocess.TimeoutExpired as e:
            logger.error("Command timed out after %ss: %s", self._timeout, " ".join(argv))
            msg = f"timed out after {self._timeout:g}s"
            raise CommandError(args, TIMEOUT_RETURNCODE, msg) from e

    def _run_checked(self, args: list[str]) -> CommandResult:
        """Run a command and raise CommandError on a non-zero exit code.

        Raises:
            CommandError: If the command fails.
        """
        result = self._run(args)
        if not result.success:
            raise CommandError(args, result.returncode, result.output)
        return result

    def _mutate(self, args: list[str]) -> CommandResult:
        """Run a command that changes host state.

        In dry-run mode the command is logged and reported as successful.

        Raises:
            CommandError: If the command fails.
        """
        if self._dry_run:
            logger.info("[dry-run] Would run: %s", " ".join(args))
            return CommandResult(stdout="", stderr="", returncode=0)
        logger.info("Running: %s", " ".join(args))
        return self._run_checked(args)
