"""Tests for the command runner."""

from unittest.mock import MagicMock, patch

import pytest

from stackup.shell import CommandError, run_command


class TestRunCommand:
    """Tests for run_command function."""

    def test_returns_completed_process(self):
        """Test returns the result of a successful command."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="ok\n", stderr="")

            result = run_command(["git", "status"])

            assert result.stdout == "ok\n"
            args, kwargs = mock_run.call_args
            assert args[0] == ["git", "status"]
            assert kwargs["capture_output"] is True
            assert kwargs["text"] is True

    def test_raises_with_stderr_on_failure(self):
        """Test non-zero exit raises CommandError carrying the diagnostic."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(
                returncode=128,
                stdout="",
                stderr="fatal: could not read from remote repository\n",
            )

            with pytest.raises(CommandError, match="could not read from remote") as exc_info:
                run_command(["git", "fetch", "origin"])

            assert exc_info.value.returncode == 128
            assert exc_info.value.cmd == ["git", "fetch", "origin"]

    def test_falls_back_to_stdout_for_message(self):
        """Test stdout is reported when stderr is empty."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="no such service\n", stderr="")

            with pytest.raises(CommandError, match="no such service"):
                run_command(["docker", "compose", "stop"])

    def test_no_check_returns_failure(self):
        """Test check=False leaves the exit status to the caller."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="boom")

            result = run_command(["false"], check=False)

            assert result.returncode == 1

    def test_missing_executable(self):
        """Test a missing binary is reported as CommandError."""
        with patch("subprocess.run", side_effect=FileNotFoundError("docker-compose")):
            with pytest.raises(CommandError) as exc_info:
                run_command(["docker-compose", "ps"])

            assert exc_info.value.returncode == 127

    def test_passes_cwd(self, tmp_path):
        """Test the working directory is forwarded."""
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="", stderr="")

            run_command(["git", "status"], cwd=tmp_path)

            assert mock_run.call_args.kwargs["cwd"] == tmp_path
