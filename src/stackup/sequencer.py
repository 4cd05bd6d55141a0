"""
Upgrade sequencer

Two phases, always run in this order:
1. Source update: pull the tracked branch when the remote is ahead
2. Image version: move the user version marker to the bundled seed version,
   stopping and restarting the stack around the change

Backup policy: advisory only. The operator is shown the data directories to
back up and must confirm before the marker is changed; nothing is copied
automatically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

import click

from stackup.compose import ComposeClient, compose_client_from_config
from stackup.config import load_environment, resolve_data_dirs
from stackup.git_utils import get_current_branch, get_short_revision, is_remote_ahead, pull_branch
from stackup.logger import StackupLogger
from stackup.markers import apply_seed, read_marker, seed_is_newer
from stackup.prompts import Confirmer


class SourceUpdateResult(Enum):
    """How the source update phase ended"""

    UP_TO_DATE = "up_to_date"
    PULLED = "pulled"
    SKIPPED = "skipped"


class ImageVersionResult(Enum):
    """How the image version phase ended"""

    NO_CHANGE = "no_change"
    DECLINED = "declined"
    BACKUP_DECLINED = "backup_declined"
    APPLIED = "applied"


class UpgradeAborted(Exception):
    """The operator refused a step the upgrade cannot continue without."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


@dataclass
class RunContext:
    """State shared by both phases of one run.

    Attributes:
        project_dir: Root of the stack checkout
        user_marker: Operator-controlled image version file
        seed_marker: Bundled image version file
        previous_marker: Copy of the user marker taken before it is overwritten
        compose: docker compose client for the stack
        confirmer: Source of yes/no answers
        logger: Run logger
        remote: git remote to compare against
        primary_branch: Branch the stack is expected to track
        data_dirs: (variable, path) pairs listed in the backup advice
        unset_data_keys: Configured data variables missing from the environment file
        services_stopped: True once this run has stopped the stack
    """

    project_dir: Path
    user_marker: Path
    seed_marker: Path
    previous_marker: Path
    compose: ComposeClient
    confirmer: Confirmer
    logger: StackupLogger
    remote: str = "origin"
    primary_branch: str = "main"
    data_dirs: list[tuple[str, Path]] = field(default_factory=list)
    unset_data_keys: list[str] = field(default_factory=list)
    services_stopped: bool = False

    @classmethod
    def from_config(
        cls,
        project_dir: Path,
        config: dict[str, Any],
        confirmer: Confirmer,
        logger: StackupLogger,
    ) -> RunContext:
        """Build a context from a merged configuration dictionary."""
        markers = config["markers"]
        environment_config = config["environment"]

        environment = load_environment(project_dir / environment_config["file"])
        data_dirs, unset = resolve_data_dirs(
            environment, environment_config.get("data_keys") or [], project_dir
        )

        return cls(
            project_dir=project_dir,
            user_marker=project_dir / markers["user"],
            seed_marker=project_dir / markers["seed"],
            previous_marker=project_dir / markers["previous"],
            compose=compose_client_from_config(config["compose"], project_dir),
            confirmer=confirmer,
            logger=logger,
            remote=config["git"]["remote"],
            primary_branch=config["git"]["primary_branch"],
            data_dirs=data_dirs,
            unset_data_keys=unset,
        )


def run_source_update(ctx: RunContext) -> SourceUpdateResult:
    """Offer to pull the current branch when the remote has new commits.

    Never touches services or version markers.

    Raises:
        CommandError: If any git command fails
    """
    branch = get_current_branch(ctx.project_dir)
    if not branch:
        ctx.logger.warning("HEAD is detached; skipping source update.")
        return SourceUpdateResult.SKIPPED

    revision = get_short_revision(ctx.project_dir)
    ctx.logger.info(
        f"Checking {ctx.remote}/{branch} for updates",
        branch=branch,
        revision=revision,
    )

    if branch != ctx.primary_branch:
        ctx.logger.warning(
            f"You are on branch '{branch}', not '{ctx.primary_branch}'. Continuing anyway.",
            branch=branch,
        )

    if not is_remote_ahead(branch, remote=ctx.remote, cwd=ctx.project_dir):
        ctx.logger.info("Source is up to date.", result=SourceUpdateResult.UP_TO_DATE.value)
        return SourceUpdateResult.UP_TO_DATE

    click.echo(f"A source update is available for '{branch}'.")
    click.echo(f"  Current revision: {revision}")
    if not ctx.confirmer.confirm("Pull the update now?"):
        ctx.logger.info("Skipping source update.", result=SourceUpdateResult.SKIPPED.value)
        return SourceUpdateResult.SKIPPED

    pull_branch(branch, remote=ctx.remote, cwd=ctx.project_dir)
    ctx.logger.info(
        f"Pulled {ctx.remote}/{branch}.",
        result=SourceUpdateResult.PULLED.value,
        previous_revision=revision,
    )
    return SourceUpdateResult.PULLED


def run_image_version(ctx: RunContext) -> ImageVersionResult:
    """Move the user image version to the seed version, with confirmation.

    Raises:
        MarkerError: If either marker file is missing or empty
        UpgradeAborted: If services are running and the operator will not stop them
        CommandError: If a docker compose command fails
    """
    user_version = read_marker(ctx.user_marker)
    seed_version = read_marker(ctx.seed_marker)

    if not seed_is_newer(seed_version, user_version):
        ctx.logger.info(
            f"Image version {user_version} is current; no change.",
            user_version=user_version,
            seed_version=seed_version,
            result=ImageVersionResult.NO_CHANGE.value,
        )
        return ImageVersionResult.NO_CHANGE

    click.echo("A new image version is available.")
    click.echo(f"  Current version: {user_version}")
    click.echo(f"  New version:     {seed_version}")
    if not ctx.confirmer.confirm(f"Upgrade the image version to {seed_version}?"):
        ctx.logger.info(
            f"Keeping image version {user_version}.",
            result=ImageVersionResult.DECLINED.value,
        )
        return ImageVersionResult.DECLINED

    _stop_services(ctx)

    if not _confirm_backup(ctx):
        ctx.logger.warning(
            "Upgrade cancelled; no files were changed.",
            result=ImageVersionResult.BACKUP_DECLINED.value,
        )
        _offer_restart(ctx)
        return ImageVersionResult.BACKUP_DECLINED

    apply_seed(ctx.user_marker, ctx.seed_marker, ctx.previous_marker)
    ctx.logger.info(
        f"Image version updated {user_version} -> {seed_version}.",
        user_version=user_version,
        seed_version=seed_version,
        previous_marker=str(ctx.previous_marker),
    )

    _offer_restart(ctx)
    return ImageVersionResult.APPLIED


def _offer_restart(ctx: RunContext) -> None:
    """Offer to start the services again if this run stopped them."""
    if not ctx.services_stopped:
        return
    if ctx.confirmer.confirm("Start the services again?"):
        ctx.compose.start_detached()
        ctx.logger.info("Services started.")
    else:
        ctx.logger.warning("Services left stopped.")


def _stop_services(ctx: RunContext) -> None:
    """Stop the stack if it is running, or abort the whole run."""
    if not ctx.compose.services_running():
        return

    click.echo("Services are running and must be stopped to upgrade.")
    if not ctx.confirmer.confirm("Stop the services now?"):
        raise UpgradeAborted("Services must be stopped to upgrade. Exiting.")

    ctx.compose.stop()
    ctx.services_stopped = True
    ctx.logger.info("Services stopped.")


def _confirm_backup(ctx: RunContext) -> bool:
    """Show the backup advice and ask the operator to go on."""
    ctx.logger.warning("Back up your data before changing the image version.")
    if ctx.data_dirs:
        click.echo("Data directories:")
        for key, path in ctx.data_dirs:
            click.echo(f"  {key}: {path}")
    for key in ctx.unset_data_keys:
        ctx.logger.warning(f"{key} is not set in the environment file.", key=key)
    return ctx.confirmer.confirm("Have you backed up your data? Proceed with the upgrade?")
