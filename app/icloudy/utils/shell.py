"""Shell execution utilities for discovery probes.

Probes shell out to ``reg`` and ``dscl``. Their output is decoded
leniently, and a probe that cannot run is logged and skipped rather
than raised.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass

from icloudy.core.deadline import Deadline

logger = logging.getLogger(__name__)


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
    def lines(self) -> list[str]:
        """Non-blank stdout lines, stripped."""
        return [line.strip() for line in self.stdout.splitlines() if line.strip()]


def run_command(args: list[str], *, timeout: float | None = None) -> CommandResult:
    """Execute a command and capture its output.

    Undecodable bytes are replaced, since registry and directory-service
    output may use the console code page.

    Args:
        args: Command and arguments to execute.
        timeout: Maximum time in seconds to wait for the command.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.TimeoutExpired: If command exceeds timeout.
        FileNotFoundError: If command executable is not found.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        errors="replace",
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )


def probe_command(
    args: list[str], *, timeout: float, deadline: Deadline | None = None
) -> CommandResult | None:
    """Run a discovery probe command.

    Args:
        args: Command and arguments to execute.
        timeout: Per-command limit in seconds, capped by ``deadline``.
        deadline: Overall discovery deadline.

    Returns:
        The successful CommandResult, or None if the command is missing,
        timed out or exited non-zero.
    """
    if deadline is not None:
        timeout = deadline.cap(timeout)

    try:
        result = run_command(args, timeout=timeout)
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Probe %s failed: %s", args[0], e)
        return None

    if not result.success:
        logger.debug("Probe %s exited %d: %s", args[0], result.returncode, result.stderr.strip())
        return None
    return result


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH."""
    return shutil.which(name) is not None
