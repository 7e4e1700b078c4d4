"""Subprocess execution with Result-based error handling.

The deploy workflow never applies timeouts: a hung build or publish blocks
until the user interrupts it.

Usage:
    match run(["git", "status", "--porcelain"], cwd=root):
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from pkgship.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run", "run_streaming", "which"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """Error from a failed subprocess execution.

    Attributes:
        command: The command that was executed.
        returncode: Exit code of the process, -1 if it could not be started.
        stdout: Standard output (empty when output was streamed).
        stderr: Standard error, or the OS error when spawning failed.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def spawn_failed(self) -> bool:
        return self.returncode == -1

    def __str__(self) -> str:
        cmd_str = " ".join(self.command[:3])
        if len(self.command) > 3:
            cmd_str += " ..."
        return f"{cmd_str} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[str, ProcessError]:
    """Execute a command and capture its output.

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
            check=False,
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


def run_streaming(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
) -> Result[None, ProcessError]:
    """Execute a command with its output going straight to the terminal.

    Used for the packaging tool, whose progress output (and any credential
    prompt during publish) the user needs to see.
    """
    try:
        proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=False)
    except OSError as e:
        return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=str(e)))

    if proc.returncode != 0:
        return Err(
            ProcessError(command=tuple(cmd), returncode=proc.returncode, stdout="", stderr="")
        )

    return Ok(None)


def which(tool: str) -> str | None:
    """Return the full path of tool on PATH, or None."""
    return shutil.which(tool)
