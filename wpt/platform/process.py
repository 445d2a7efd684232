"""Subprocess execution with Result-based error handling.

Every external tool the release touches (npm, composer, rsync, git) is run
through a CommandRunner. Services receive the runner as a dependency, so
tests substitute a fake that records commands instead of spawning them.

Usage:
    runner = SubprocessRunner()
    match runner.run(["git", "add", "package.json"], cwd=root):
        case Ok(_):
            ...
        case Err(error):
            console.warning(str(error))
"""

from __future__ import annotations

import shlex
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from wpt.core.result import Err, Ok, Result

__all__ = [
    "CommandRunner",
    "ProcessError",
    "RecordingRunner",
    "SubprocessRunner",
    "run",
    "run_silent",
]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error or the reason the process could not start.
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

    @property
    def message(self) -> str:
        detail = self.stderr.strip().splitlines()
        if detail:
            return f"{self}: {detail[-1]}"
        return str(self)


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and return its stdout.

    Args:
        cmd: Command and arguments to execute.
        cwd: Working directory for the command.
        env: Environment variables (uses current env if None).
        timeout: Maximum seconds to wait (None for no limit).

    Returns:
        Ok(stdout) on success, Err(ProcessError) on failure.
    """
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            env=env,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout=e.stdout if isinstance(e.stdout, str) else "",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=proc.returncode,
                stdout=proc.stdout,
                stderr=proc.stderr,
            )
        )

    return Ok(proc.stdout)


def run_silent(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with output streaming to the terminal.

    Used for package installs and builds, where the operator wants to see
    progress. Nothing is captured; on failure only the exit code is known.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, timeout=timeout, check=False)
    except subprocess.TimeoutExpired:
        return Err(
            ProcessError(
                command=tuple(cmd),
                returncode=-1,
                stdout="",
                stderr=f"Command timed out after {timeout}s",
            )
        )
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr=""))

    return Ok(None)


class CommandRunner(Protocol):
    """Narrow capability for running external tools."""

    def run(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        """Run a command to completion in `cwd`."""
        ...

    def available(self, tool: str) -> bool:
        """True if `tool` can be found on PATH."""
        ...


class SubprocessRunner:
    """CommandRunner backed by real subprocesses.

    Args:
        timeout: Optional per-command limit in seconds (None: wait forever).
        capture: Capture output instead of streaming it to the terminal.
    """

    def __init__(self, *, timeout: float | None = None, capture: bool = False) -> None:
        self._timeout = timeout
        self._capture = capture

    def run(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        if self._capture:
            result = run(cmd, cwd=cwd, timeout=self._timeout)
            if isinstance(result, Err):
                return result
            return Ok(None)
        return run_silent(cmd, cwd=cwd, timeout=self._timeout)

    def available(self, tool: str) -> bool:
        return shutil.which(tool) is not None


def _empty_calls() -> list[tuple[list[str], Path]]:
    return []


def _empty_failures() -> dict[str, int]:
    return {}


@dataclass
class RecordingRunner:
    """CommandRunner for tests: records commands instead of running them.

    Attributes:
        tools: Tool names `available()` reports as installed
        failures: Command prefix ("git commit", "npm") -> exit code to fail with
        calls: Every (command, cwd) received, in order
    """

    tools: frozenset[str] = frozenset()
    failures: dict[str, int] = field(default_factory=_empty_failures)
    calls: list[tuple[list[str], Path]] = field(default_factory=_empty_calls)

    def run(self, cmd: list[str], cwd: Path) -> Result[None, ProcessError]:
        self.calls.append((list(cmd), cwd))
        line = shlex.join(cmd)
        for prefix, code in self.failures.items():
            if line == prefix or line.startswith(prefix + " "):
                return Err(ProcessError(command=tuple(cmd), returncode=code, stdout="", stderr=""))
        return Ok(None)

    def available(self, tool: str) -> bool:
        return tool in self.tools

    @property
    def commands(self) -> list[str]:
        return [shlex.join(cmd) for cmd, _ in self.calls]
