"""stackup CLI - Upgrade utility for docker compose application stacks."""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from stackup import __version__
from stackup.commands._upgrade_impl import run_upgrade
from stackup.commands.upgrade import upgrade
from stackup.compose import compose_client_from_config
from stackup.config import load_config
from stackup.git_utils import get_current_branch, get_short_revision, is_remote_ahead
from stackup.markers import MarkerError, read_marker, seed_is_newer
from stackup.shell import CommandError


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="stackup")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """stackup - Upgrade a self-hosted docker compose stack.

    Run without a command to upgrade the stack in the current directory:
    pull new source from the tracked branch, then move the image version
    to the one bundled with the source.
    """
    if ctx.invoked_subcommand is None:
        sys.exit(run_upgrade())


cli.add_command(upgrade)


@cli.command("help")
@click.pass_context
def help_command(ctx: click.Context) -> None:
    """Show this message and exit."""
    click.echo(ctx.parent.get_help())


@cli.command()
@click.option(
    "--project-dir",
    "-C",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Stack checkout to inspect (default: current directory).",
)
@click.option(
    "--format",
    "output_format",
    default="text",
    type=click.Choice(["text", "json"]),
    help="Output format (default: text)",
)
def check(project_dir: Optional[Path], output_format: str) -> None:
    """Report available updates without changing anything.

    Shows the branch and revision, whether the remote is ahead, the user
    and seed image versions and whether services are running.

    Examples:

      # Text report for the current directory
      stackup check

      # JSON output
      stackup check --format json
    """
    project_root = (project_dir or Path.cwd()).resolve()
    config = load_config(project_root)
    remote = config["git"]["remote"]
    markers = config["markers"]

    try:
        branch = get_current_branch(project_root)
        revision = get_short_revision(project_root)
        remote_ahead = is_remote_ahead(branch, remote=remote, cwd=project_root) if branch else False
        user_version = read_marker(project_root / markers["user"])
        seed_version = read_marker(project_root / markers["seed"])
        services_running = compose_client_from_config(config["compose"], project_root).services_running()
    except (CommandError, MarkerError) as e:
        click.echo(click.style(f"Error: {e}", fg="red"))
        sys.exit(1)

    report = {
        "branch": branch,
        "revision": revision,
        "primary_branch": branch == config["git"]["primary_branch"],
        "source_update_available": remote_ahead,
        "user_version": user_version,
        "seed_version": seed_version,
        "image_update_available": seed_is_newer(seed_version, user_version),
        "services_running": services_running,
    }

    if output_format == "json":
        click.echo(json.dumps(report, indent=2))
        return

    click.echo(f"Branch:          {branch or '(detached)'} @ {revision}")
    if not report["primary_branch"]:
        click.echo(click.style(f"  Not on {config['git']['primary_branch']}", fg="yellow"))
    click.echo(f"Source update:   {'available' if remote_ahead else 'up to date'}")
    click.echo(f"Image version:   {user_version} (seed {seed_version})")
    click.echo(f"Image update:    {'available' if report['image_update_available'] else 'none'}")
    click.echo(f"Services:        {'running' if services_running else 'stopped'}")


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
