"""Implementation of the stackup upgrade command."""

from pathlib import Path
from typing import Optional

import click
import yaml

from stackup.config import load_config
from stackup.logger import StackupLogger
from stackup.markers import MarkerError
from stackup.prompts import AssumeYesConfirmer, ClickConfirmer, Confirmer
from stackup.sequencer import (
    ImageVersionResult,
    RunContext,
    UpgradeAborted,
    run_image_version,
    run_source_update,
)
from stackup.shell import CommandError

EXIT_SUCCESS = 0
EXIT_ERROR = 1


def run_upgrade(
    project_dir: Optional[Path] = None,
    assume_yes: bool = False,
    confirmer: Optional[Confirmer] = None,
) -> int:
    """Run the source update phase, then the image version phase.

    Args:
        project_dir: Root of the stack checkout (default: current directory).
        assume_yes: Answer yes to every prompt.
        confirmer: Prompt provider; overrides assume_yes when given.

    Returns:
        Exit code: 0 on completion (declined steps included), non-zero on abort.
    """
    project_root = (project_dir or Path.cwd()).resolve()

    if not project_root.is_dir():
        click.echo(click.style(f"Error: Project directory not found: {project_root}", fg="red"))
        return EXIT_ERROR
    if not (project_root / ".git").exists():
        click.echo(click.style(f"Error: Not a git checkout: {project_root}", fg="red"))
        return EXIT_ERROR

    try:
        config = load_config(project_root)
    except yaml.YAMLError as e:
        click.echo(click.style(f"Error: Invalid configuration: {e}", fg="red"))
        return EXIT_ERROR

    log_dir = Path(config["logging"]["dir"])
    if not log_dir.is_absolute():
        log_dir = project_root / log_dir
    logger = StackupLogger(log_dir=log_dir)
    logger.debug(f"Upgrade run {logger.run_id} in {project_root}", project_dir=str(project_root))

    if confirmer is None:
        confirmer = AssumeYesConfirmer() if assume_yes else ClickConfirmer()

    try:
        ctx = RunContext.from_config(project_root, config, confirmer, logger)
        source_result = run_source_update(ctx)
        image_result = run_image_version(ctx)
    except UpgradeAborted as e:
        logger.error(str(e))
        return e.exit_code
    except (CommandError, MarkerError) as e:
        logger.error(str(e))
        return EXIT_ERROR

    if image_result == ImageVersionResult.BACKUP_DECLINED:
        return EXIT_ERROR

    warnings = sum(1 for entry in logger.read_run() if entry["level"] == "WARNING")
    logger.info(
        "Upgrade finished.",
        source=source_result.value,
        image=image_result.value,
        services_stopped=ctx.services_stopped,
        warnings=warnings,
    )
    if warnings:
        click.echo(click.style(f"Done with {warnings} warning(s); see run {logger.run_id}.", fg="yellow"))
    else:
        click.echo(click.style("Done.", fg="green"))
    return EXIT_SUCCESS
