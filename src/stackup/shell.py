"""Thin wrapper around subprocess for the external collaborators (git, docker compose)."""

import subprocess
from pathlib import Path
from typing import Sequence


class CommandError(RuntimeError):
    """An external command failed or could not be started."""

    def __init__(self, cmd: Sequence[str], returncode: int, output: str = "") -> None:
        self.cmd = list(cmd)
        self.returncode = returncode
        self.output = output.strip()
        message = f"Command failed ({returncode}): {' '.join(self.cmd)}"
        if self.output:
            message = f"{message}\n{self.output}"
        super().__init__(message)


def run_command(
    cmd: Sequence[str],
    cwd: Path | None = None,
    check: bool = True,
) -> subprocess.CompletedProcess:
    """Run a command and capture its text output.

    Args:
        cmd: Command and arguments.
        cwd: Working directory (default: current directory).
        check: Raise CommandError on a non-zero exit status.

    Returns:
        The completed process.

    Raises:
        CommandError: If the executable is missing or, with check, exits non-zero.
    """
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise CommandError(cmd, 127, str(e)) from e

    if check and result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stderr or result.stdout or "")

    return result
