"""Subprocess execution with Result-based error handling.

External tools (pnpm, npm, changeset, wasm-opt) are always invoked with an
argument list, never through a shell. Their output streams straight to the
terminal.

Usage:
    runner = CommandRunner(console=console)
    match runner.run(["pnpm", "build"], cwd=root):
        case Ok(_):
            ...
        case Err(error):
            console.error(str(error))
"""

from __future__ import annotations

import shlex
import subprocess
import threading
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from vary.core.result import Err, Ok, Result
from vary.output.console import Style

if TYPE_CHECKING:
    from vary.output.console import ConsoleProtocol

__all__ = ["ProcessError", "Runner", "CommandRunner", "MockRunner", "RecordedCall", "run_silent"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it could not start).
        stdout: Standard output (empty when streamed).
        stderr: Standard error or the OS error message.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: Mapping[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with inherited stdio.

    Nothing is captured; the exit code alone decides success.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=dict(env) if env is not None else None,
            check=False,
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )
    return Ok(None)


class Runner(Protocol):
    """Anything that can run an external command to completion."""

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ProcessError]: ...


class CommandRunner:
    """Streams external commands to the terminal.

    With ``debug`` enabled the command line is echoed and nothing runs.
    """

    def __init__(self, *, console: ConsoleProtocol, debug: bool = False) -> None:
        self._console = console
        self._debug = debug

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ProcessError]:
        line = shlex.join(cmd)
        if self._debug:
            self._console.info(f"vary: {line}")
            return Ok(None)
        self._console.print(f"$ {line}", Style.DIM)
        return run_silent(cmd, cwd=cwd, env=env)


@dataclass(frozen=True, slots=True)
class RecordedCall:
    cmd: tuple[str, ...]
    cwd: Path
    env: dict[str, str] | None


class MockRunner:
    """Runner that records commands for testing.

    Usage:
        runner = MockRunner()
        runner.fail(["pnpm", "build"], returncode=2)
        service = Service(runner=runner)
        assert runner.commands == [["pnpm", "build"]]
    """

    def __init__(self) -> None:
        self.calls: list[RecordedCall] = []
        self._failures: dict[tuple[str, ...], int] = {}
        self._lock = threading.Lock()

    def fail(self, cmd: list[str], *, returncode: int = 1) -> None:
        self._failures[tuple(cmd)] = returncode

    @property
    def commands(self) -> list[list[str]]:
        return [list(c.cmd) for c in self.calls]

    def run(
        self,
        cmd: list[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> Result[None, ProcessError]:
        key = tuple(cmd)
        with self._lock:
            self.calls.append(RecordedCall(key, cwd, dict(env) if env is not None else None))
        returncode = self._failures.get(key)
        if returncode is not None:
            return Err(ProcessError(command=key, returncode=returncode, stdout="", stderr=""))
        return Ok(None)
