"""Tests for the focustimer CLI layer.

Logging setup is patched out so tests never touch the user's log directory;
the clock runs fast via ``FOCUSTIMER_TICK_INTERVAL``.
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path
from unittest.mock import MagicMock, patch

import click.testing
import pytest

from focustimer.cli.main import cli


@pytest.fixture()
def runner() -> click.testing.CliRunner:
    """Return a Click CliRunner for invoking CLI commands."""
    return click.testing.CliRunner()


@pytest.fixture(autouse=True)
def fast_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FOCUSTIMER_TICK_INTERVAL", "0.05")
    monkeypatch.setenv("FOCUSTIMER_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("FOCUSTIMER_NOTIFY", "1")


@pytest.fixture(autouse=True)
def no_logging_setup() -> Iterator[MagicMock]:
    with patch("focustimer.cli.main.setup_logging") as mocked:
        yield mocked


# ---------------------------------------------------------------------------
# focustimer run
# ---------------------------------------------------------------------------


class TestRunCommand:
    """Tests for ``focustimer run TITLE``."""

    def test_run_until_finished(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--seconds", "1"])
        assert result.exit_code == 0, result.output
        assert "0:01 remaining - Write report" in result.output
        assert "Timer Completed! Time's up for: Write report" in result.output
        assert "Session finished: Write report" in result.output

    def test_quit_closes_session(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--minutes", "5"], input="q\n")
        assert result.exit_code == 0, result.output
        assert "5:00 remaining - Write report" in result.output
        assert "Session closed" in result.output
        assert "Time's up" not in result.output

    def test_pause_and_status(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(
            cli, ["run", "Write report", "--seconds", "90"], input="p\n?\nq\n"
        )
        assert result.exit_code == 0, result.output
        assert "1:30 remaining (paused) - Write report" in result.output
        assert "Session closed" in result.output

    def test_invalid_transition_keeps_session(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--seconds", "90"], input="r\nq\n")
        assert result.exit_code == 0, result.output
        assert "resume() is not valid from active state" in result.output
        assert "Session closed" in result.output

    def test_unknown_command(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--seconds", "90"], input="x\nq\n")
        assert result.exit_code == 0, result.output
        assert "Unknown command: x" in result.output

    def test_move_is_not_supported_in_terminal(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--seconds", "90"], input="m\nq\n")
        assert result.exit_code == 0, result.output
        assert "This surface cannot be moved." in result.output

    def test_logging_configured_from_settings(
        self, runner: click.testing.CliRunner, no_logging_setup: MagicMock, tmp_path: Path
    ) -> None:
        runner.invoke(cli, ["run", "Write report", "--seconds", "90"], input="q\n")
        no_logging_setup.assert_called_once()
        assert no_logging_setup.call_args.kwargs["log_dir"] == tmp_path / "logs"

    # --- Invalid arguments ---

    def test_run_missing_title(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run"])
        assert result.exit_code != 0

    def test_run_zero_seconds(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--seconds", "0"])
        assert result.exit_code != 0

    def test_run_non_integer_minutes(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--minutes", "abc"])
        assert result.exit_code != 0

    def test_minutes_and_seconds_conflict(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["run", "Write report", "--minutes", "1", "--seconds", "5"])
        assert result.exit_code == 2
        assert "either --minutes or --seconds" in result.output


# ---------------------------------------------------------------------------
# focustimer --version
# ---------------------------------------------------------------------------


class TestVersionFlag:
    """Tests for ``focustimer --version``."""

    def test_version_output(self, runner: click.testing.CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output
