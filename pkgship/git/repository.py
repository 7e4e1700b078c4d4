"""Git collaborator for the deploy workflow.

Only two operations are needed: reading the working tree status and creating
an annotated release tag. Nothing here pushes.

Usage:
    repo = Repository(Path("."))
    match repo.status():
        case Ok(status) if not status.is_clean:
            print(f"{len(status.entries)} uncommitted changes")
        case Err(e):
            print(f"git unavailable: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pkgship.core.result import Err, Ok, Result
from pkgship.platform.process import ProcessError
from pkgship.platform.process import run as run_process

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code (-1 when git could not be started)
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single ``git status --porcelain`` line.

    Attributes:
        xy: Two-character status code (e.g. "M ", " M", "??")
        path: File path
    """

    xy: str
    path: str

    def pretty_xy(self) -> str:
        """Format XY with dots for spaces (". M" instead of " M")."""
        return self.xy.replace(" ", ".")


@dataclass(frozen=True, slots=True)
class GitStatus:
    entries: tuple[StatusEntry, ...] = field(default_factory=tuple)

    @property
    def is_clean(self) -> bool:
        """True if the working tree has no changes (untracked files included)."""
        return len(self.entries) == 0


class Repository:
    """Git operations on the project being released.

    Attributes:
        path: Working directory git runs in
        git: git executable name or path
    """

    def __init__(self, path: Path, git: str = "git") -> None:
        self.path = path
        self.git = git

    def status(self) -> Result[GitStatus, GitError]:
        """Run ``git status --porcelain`` and parse the entries."""
        result = self._run(["status", "--porcelain"])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command="status",
                        message=e.stderr.strip() or "git status failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(stdout):
                return Ok(parse_porcelain(stdout))

    def create_annotated_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD. The tag stays local."""
        result = self._run(["tag", "-a", name, "-m", message])
        match result:
            case Err(e):
                return Err(
                    GitError(
                        command=f"tag -a {name}",
                        message=e.stderr.strip() or "git tag failed",
                        returncode=e.returncode,
                    )
                )
            case Ok(_):
                return Ok(None)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        return run_process([self.git, *args], cwd=self.path)


def parse_porcelain(output: str) -> GitStatus:
    """Parse ``git status --porcelain`` (v1, no branch header) output."""
    entries: list[StatusEntry] = []
    for line in output.splitlines():
        if len(line) < 4:
            continue
        entries.append(StatusEntry(xy=line[:2], path=line[3:]))
    return GitStatus(entries=tuple(entries))
