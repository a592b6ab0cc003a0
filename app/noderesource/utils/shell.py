"""Shell execution utilities.

Provides subprocess execution with proper error handling, optionally
entering the host mount namespace when the agent runs in a container.
"""

import subprocess
from dataclasses import dataclass

# Enter the namespaces of PID 1 so tools act on the host, not the container.
NSENTER_PREFIX: tuple[str, ...] = (
    "nsenter",
    "--mount=/proc/1/ns/mnt",
    "--ipc=/proc/1/ns/ipc",
    "--net=/proc/1/ns/net",
    "--uts=/proc/1/ns/uts",
)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Result of a shell command execution.

    Attributes:
        stdout: Standard output from the command.
        stderr: Standard error from the command.
        returncode: Exit code of the command.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if command executed successfully."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, in that order."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


def host_command(args: list[str], *, host_namespace: bool = False) -> list[str]:
    """Build a command line, prefixed with nsenter when requested.

    Args:
        args: Command and arguments to execute.
        host_namespace: If True, run inside the namespaces of PID 1.

    Returns:
        The final argument vector.
    """
    if host_namespace:
        return [*NSENTER_PREFIX, *args]
    return list(args)


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 60.0,
    cwd: str | None = None,
) -> CommandResult:
    """Execute a shell command and return the result.

    Args:
        args: Command and arguments to execute.
        check: If True, raise CalledProcessError on non-zero exit.
        timeout: Maximum time in seconds to wait for command.
        cwd: Working directory for the command. If None, uses current directory.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and command fails.
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
        cwd=cwd,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )
