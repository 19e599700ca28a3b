"""Subprocess execution with Result-based error handling.

Git commands run through `run` (output captured, parsed by the caller);
the project's test command runs through `run_streaming` so the operator
sees test output live.

Usage:
    result = run(["git", "rev-parse", "HEAD"], cwd=root)
    match result:
        case Ok(stdout):
            print(stdout.strip())
        case Err(error):
            print(f"Failed: {error.stderr}")
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from relkit.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: The exit code of the process (-1 if it never ran).
        stdout: Standard output (may be empty).
        stderr: Standard error (contains error details).
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


def _failed(
    cmd: list[str], returncode: int, stdout: str = "", stderr: str = ""
) -> Err[ProcessError]:
    return Err(ProcessError(tuple(cmd), returncode, stdout, stderr))


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
) -> Result[str, ProcessError]:
    """Run a command, capturing its output.

    Returns:
        Ok(stdout) on exit code 0. A non-zero exit, a timeout or a command
        that cannot be started is an Err(ProcessError); returncode is -1
        when the process did not finish.
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
        partial = e.stdout if isinstance(e.stdout, str) else ""
        return _failed(cmd, -1, partial, f"Command timed out after {timeout}s")
    except OSError as e:
        return _failed(cmd, -1, stderr=str(e))

    if proc.returncode != 0:
        return _failed(cmd, proc.returncode, proc.stdout, proc.stderr)
    return Ok(proc.stdout)


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Run a command attached to the terminal; only the exit code is kept."""
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return _failed(cmd, -1, stderr=str(e))

    if proc.returncode != 0:
        return _failed(cmd, proc.returncode)
    return Ok(None)
