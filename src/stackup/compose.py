"""docker compose wrapper for querying, stopping and starting the stack."""

import shlex
import shutil
import subprocess
from pathlib import Path

from stackup.shell import CommandError, run_command


def detect_compose_command() -> list[str]:
    """Return the preferred docker compose invocation as a list.

    Raises:
        CommandError: If neither ``docker compose`` nor ``docker-compose`` is available.
    """
    docker_path = shutil.which("docker")
    legacy_path = shutil.which("docker-compose")

    if docker_path is not None:
        probe = subprocess.run(
            [docker_path, "compose", "version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        if probe.returncode == 0:
            return [docker_path, "compose"]

    if legacy_path is not None:
        return [legacy_path]

    raise CommandError(
        ["docker", "compose"],
        127,
        "Neither 'docker compose' nor 'docker-compose' is available in PATH.",
    )


def compose_client_from_config(compose_config: dict, project_dir: Path) -> "ComposeClient":
    """Build a client from the ``compose`` config section.

    ``command`` may be None (auto-detect on first use), a shell-style string or a list.
    """
    command = compose_config.get("command")
    if isinstance(command, str):
        command = shlex.split(command)
    return ComposeClient(command, project_dir, compose_config.get("file"))


class ComposeClient:
    """Runs docker compose commands against one project directory."""

    def __init__(
        self,
        command: list[str] | None,
        project_dir: Path,
        compose_file: str | None = None,
    ) -> None:
        self._command = list(command) if command is not None else None
        self.project_dir = project_dir
        self.compose_file = compose_file

    @property
    def command(self) -> list[str]:
        """The compose invocation, detected on first use when not configured."""
        if self._command is None:
            self._command = detect_compose_command()
        return self._command

    def _base(self) -> list[str]:
        if self.compose_file:
            return [*self.command, "-f", self.compose_file]
        return list(self.command)

    def _run(self, *args: str) -> subprocess.CompletedProcess:
        return run_command([*self._base(), *args], cwd=self.project_dir)

    def services_running(self) -> bool:
        """Check whether any container of the stack is running.

        Returns:
            True if ``ps -q`` lists at least one container.
        """
        result = self._run("ps", "-q")
        return (result.stdout or "").strip() != ""

    def stop(self) -> None:
        """Stop all services of the stack."""
        self._run("stop")

    def start_detached(self) -> None:
        """Start all services in the background."""
        self._run("up", "-d")
