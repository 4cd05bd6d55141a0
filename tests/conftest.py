"""Shared fixtures for stackup tests."""

import subprocess
from pathlib import Path

import pytest


class ScriptedConfirmer:
    """Confirmer test double that replays canned answers in order."""

    def __init__(self, *answers: bool) -> None:
        self.answers = list(answers)
        self.prompts: list[str] = []

    def confirm(self, text: str) -> bool:
        self.prompts.append(text)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {text}")
        return self.answers.pop(0)


class FakeCommands:
    """Stands in for subprocess.run, answering git and docker compose commands.

    Attributes:
        calls: Every command run, in order
        branch: Reported current branch
        fetch_report: Text git writes to stderr for ``fetch --dry-run``
        ps_output: Output of ``compose ps -q``
        fail_on: Command prefix that exits non-zero
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.branch = "main"
        self.fetch_report = ""
        self.ps_output = ""
        self.fail_on: list[str] | None = None

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)

        if self.fail_on is not None and cmd[: len(self.fail_on)] == self.fail_on:
            return subprocess.CompletedProcess(cmd, 128, "", "fatal: unable to access remote\n")
        if cmd[:3] == ["git", "branch", "--show-current"]:
            return subprocess.CompletedProcess(cmd, 0, f"{self.branch}\n", "")
        if cmd[:2] == ["git", "rev-parse"]:
            return subprocess.CompletedProcess(cmd, 0, "abc1234\n", "")
        if cmd[:2] == ["git", "fetch"]:
            return subprocess.CompletedProcess(cmd, 0, "", self.fetch_report)
        if cmd[-2:] == ["ps", "-q"]:
            return subprocess.CompletedProcess(cmd, 0, self.ps_output, "")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def count(self, *suffix: str) -> int:
        """Number of calls ending with the given arguments."""
        return sum(1 for c in self.calls if c[-len(suffix):] == list(suffix))

    def ran(self, *prefix: str) -> bool:
        return any(c[: len(prefix)] == list(prefix) for c in self.calls)


@pytest.fixture
def fake_commands(monkeypatch):
    """Route subprocess.run through a FakeCommands instance."""
    fake = FakeCommands()
    monkeypatch.setattr(subprocess, "run", fake)
    return fake


@pytest.fixture
def stack_project(tmp_path: Path, monkeypatch) -> Path:
    """A stack checkout with user version 2 and seed version 5."""
    project = tmp_path / "stack"
    (project / ".git").mkdir(parents=True)
    (project / "config").mkdir()
    (project / "seed").mkdir()
    (project / "config" / "image_version").write_text("2\n")
    (project / "seed" / "image_version").write_text("5\n")
    (project / ".stackup").mkdir()
    (project / ".stackup" / "config.yaml").write_text(
        "compose:\n  command: docker compose\n"
    )

    # Keep the developer's own ~/.config/stackup out of the tests
    monkeypatch.setattr(
        "stackup.config.get_global_config_dir", lambda: tmp_path / "global-config"
    )
    return project
