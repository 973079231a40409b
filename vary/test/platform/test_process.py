"""Tests for vary.platform.process module."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from vary.core.result import Err, Ok
from vary.output.console import MockConsole, Style
from vary.platform.process import CommandRunner, ProcessError, run_silent


class TestProcessError:
    """Test ProcessError dataclass."""

    def test_str_short_command(self) -> None:
        error = ProcessError(command=("pnpm", "build"), returncode=1, stdout="", stderr="")
        assert str(error) == "pnpm build failed (exit 1)"

    def test_str_long_command_truncated(self) -> None:
        error = ProcessError(
            command=("npm", "publish", "--registry", "https://registry.npmjs.com/"),
            returncode=1,
            stdout="",
            stderr="",
        )
        assert str(error) == "npm publish --registry ... failed (exit 1)"

    def test_frozen(self) -> None:
        error = ProcessError(("cmd",), 1, "", "")
        with pytest.raises(AttributeError):
            error.returncode = 2  # type: ignore[misc]


class TestRunSilent:
    def test_success(self, tmp_path: Path) -> None:
        result = run_silent([sys.executable, "-c", "pass"], cwd=tmp_path)
        assert isinstance(result, Ok)

    def test_failure_returns_error(self, tmp_path: Path) -> None:
        result = run_silent([sys.executable, "-c", "import sys; sys.exit(42)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 42

    def test_command_not_found(self, tmp_path: Path) -> None:
        result = run_silent(["nonexistent_command_12345"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == -1
        assert result.error.stderr

    def test_env_is_passed(self, tmp_path: Path) -> None:
        script = "import os, sys; sys.exit(0 if os.environ.get('VARY_X') == 'y' else 3)"
        result = run_silent([sys.executable, "-c", script], cwd=tmp_path, env={"VARY_X": "y"})
        assert isinstance(result, Ok)

    def test_cwd_is_used(self, tmp_path: Path) -> None:
        (tmp_path / "marker").write_text("", encoding="utf-8")
        script = "import os, sys; sys.exit(0 if os.path.exists('marker') else 3)"
        result = run_silent([sys.executable, "-c", script], cwd=tmp_path)
        assert isinstance(result, Ok)


class TestCommandRunner:
    def test_debug_echoes_without_running(self, tmp_path: Path) -> None:
        """In debug mode a failing command still reports success: it never runs."""
        console = MockConsole()
        runner = CommandRunner(console=console, debug=True)

        result = runner.run([sys.executable, "-c", "import sys; sys.exit(1)"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert console.count(Style.INFO) == 1
        assert console.messages[0].startswith("info: vary: ")

    def test_debug_never_touches_filesystem(self, tmp_path: Path) -> None:
        console = MockConsole()
        runner = CommandRunner(console=console, debug=True)
        script = "open('created', 'w').close()"

        runner.run([sys.executable, "-c", script], cwd=tmp_path)

        assert not (tmp_path / "created").exists()

    def test_runs_and_echoes_command(self, tmp_path: Path) -> None:
        console = MockConsole()
        runner = CommandRunner(console=console)

        result = runner.run([sys.executable, "-c", "pass"], cwd=tmp_path)

        assert isinstance(result, Ok)
        assert console.count(Style.DIM) == 1
        assert console.messages[0].startswith("$ ")

    def test_failure_propagates(self, tmp_path: Path) -> None:
        runner = CommandRunner(console=MockConsole())
        result = runner.run([sys.executable, "-c", "import sys; sys.exit(5)"], cwd=tmp_path)

        assert isinstance(result, Err)
        assert result.error.returncode == 5
