"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
They don't validate correctness deeply - just that commands work.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import os
import subprocess
import sys
from pathlib import Path

import pytest

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

# Project root
PROJECT_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture
def cli(tmp_path):
    """Runner bound to a throwaway database."""

    def run_cli_command(command: str, stdin: str | None = None, timeout: int = 30) -> tuple[int, str, str]:
        """
        Run a CLI command and return exit code, stdout, stderr.

        Args:
            command: The command to run (after 'python -m kisokyu.delivery')
            stdin: Text fed to interactive prompts
            timeout: Maximum time to wait

        Returns:
            Tuple of (exit_code, stdout, stderr)
        """
        full_command = f"{sys.executable} -m kisokyu.delivery {command}"
        env = {
            **os.environ,
            "KISOKYU_DB_PATH": str(tmp_path / "state.db"),
            "KISOKYU_SEED": "42",
            "PYTHONIOENCODING": "utf-8",
        }

        result = subprocess.run(
            full_command,
            shell=True,
            cwd=PROJECT_ROOT,
            input=stdin,
            capture_output=True,
            text=True,
            encoding="utf-8",
            env=env,
            timeout=timeout,
        )

        return result.returncode, result.stdout, result.stderr

    return run_cli_command


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self, cli):
        """Main help should display without errors."""
        code, stdout, stderr = cli("--help")

        assert code == 0, f"Help failed: {stderr}"
        assert "kisokyu" in stdout.lower()
        assert "Commands" in stdout

    @pytest.mark.parametrize("command", ["study", "stats", "bank", "reset", "restore"])
    def test_command_help(self, cli, command):
        code, stdout, stderr = cli(f"{command} --help")

        assert code == 0, f"{command} help failed: {stderr}"


class TestCLIBank:
    """Test bank command."""

    def test_bank_lists_items(self, cli):
        code, stdout, stderr = cli("bank --limit 3")

        assert code == 0, f"Bank failed with: {stderr}"
        assert "95 items" in stdout
        assert "14 template pairs" in stdout


class TestCLIStats:
    """Test stats command."""

    def test_stats_on_empty_store(self, cli):
        code, stdout, stderr = cli("stats")

        assert code == 0, f"Stats failed with: {stderr}"
        assert "Items tracked" in stdout


class TestCLIStudy:
    """Drive a whole session through stdin."""

    def test_all_skips_session(self, cli):
        answers = "0\n" * 20 + "n\n"
        code, stdout, stderr = cli("study", stdin=answers)

        assert code == 0, f"Study failed with: {stderr}"
        assert "すきっぷ 20" in stdout

        code, stdout, stderr = cli("stats")
        assert code == 0
        assert "Recent Sessions" in stdout

    def test_session_survives_corrupt_database(self, cli, tmp_path):
        (tmp_path / "state.db").write_bytes(b"\x00not a database\xff" * 512)

        code, stdout, stderr = cli("study", stdin="0\n" * 20 + "n\n")

        assert code == 0, f"Study failed with: {stderr}"
        assert "すきっぷ 20" in stdout
        assert "Traceback" not in stderr


class TestCLIResetRestore:
    """Reset and restore."""

    def test_reset_yes_on_empty_store(self, cli):
        code, stdout, stderr = cli("reset --yes")

        assert code == 0, f"Reset failed with: {stderr}"
        assert "0 mastery entries" in stdout

    def test_restore_without_backup(self, cli):
        code, stdout, stderr = cli("restore")

        assert code == 1
        assert "Nothing restored" in stdout
