"""stackup upgrade command - Pull source updates and apply image version bumps."""

import sys
from pathlib import Path
from typing import Optional

import click

from stackup.commands._upgrade_impl import run_upgrade


@click.command()
@click.option(
    "--project-dir",
    "-C",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Stack checkout to upgrade (default: current directory).",
)
@click.option("--yes", "-y", "assume_yes", is_flag=True, help="Answer yes to every prompt.")
def upgrade(project_dir: Optional[Path], assume_yes: bool) -> None:
    """Upgrade the stack source and image version.

    Runs two steps in order:

    - Source: if the remote branch has new commits, offer to pull them
    - Image: if the bundled seed version is newer than the configured one,
      stop the services, confirm a backup, update the version and restart

    Exit codes:
      0 - Finished (including declined updates)
      1 - Aborted or a command failed

    Examples:
        stackup upgrade
        stackup upgrade -C /srv/stack
    """
    sys.exit(run_upgrade(project_dir=project_dir, assume_yes=assume_yes))
