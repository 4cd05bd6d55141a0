"""Git utilities for detecting and pulling source updates."""

import re
from pathlib import Path

from stackup.shell import run_command


def get_current_branch(cwd: Path | None = None) -> str:
    """Get the name of the current git branch.

    Returns:
        Current branch name.
    """
    result = run_command(["git", "branch", "--show-current"], cwd=cwd)
    return result.stdout.strip()


def get_short_revision(cwd: Path | None = None) -> str:
    """Get the abbreviated id of the checked out revision."""
    result = run_command(["git", "rev-parse", "--short", "HEAD"], cwd=cwd)
    return result.stdout.strip()


def fetch_dry_run_report(branch: str, remote: str = "origin", cwd: Path | None = None) -> str:
    """Ask git what fetching a branch would update, without updating anything.

    git prints the ref update report on stderr, so both streams are returned.

    Args:
        branch: Branch to fetch.
        remote: Remote name (default: origin).

    Returns:
        The combined report text (empty when nothing would change).

    Raises:
        CommandError: If the fetch fails, e.g. the remote is unreachable.
    """
    result = run_command(["git", "fetch", "--dry-run", remote, branch], cwd=cwd)
    return f"{result.stdout or ''}{result.stderr or ''}"


def is_remote_ahead(branch: str, remote: str = "origin", cwd: Path | None = None) -> bool:
    """Check whether the remote branch has commits the local checkout lacks.

    Returns:
        True if the dry-run report shows the ``<remote>/<branch>`` pointer moving,
        including forced updates.
    """
    # The ref may be followed by a note such as "(forced update)"
    marker = re.compile(rf"-> {re.escape(remote)}/{re.escape(branch)}(\s|$)")
    report = fetch_dry_run_report(branch, remote=remote, cwd=cwd)
    for line in report.splitlines():
        if marker.search(line):
            return True
    return False


def pull_branch(branch: str, remote: str = "origin", cwd: Path | None = None) -> None:
    """Fetch and merge the remote branch into the current checkout.

    Raises:
        CommandError: If the pull fails.
    """
    run_command(["git", "pull", remote, branch], cwd=cwd)
