"""Git operations."""

from .repository import GitError, GitStatus, Repository, StatusEntry, parse_porcelain

__all__ = [
    "GitError",
    "GitStatus",
    "Repository",
    "StatusEntry",
    "parse_porcelain",
]
