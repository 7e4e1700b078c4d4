from __future__ import annotations

import os
import shutil
import stat
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pkgship.core.config import DeployConfig
from pkgship.core.result import Err, Ok, Result
from pkgship.services.deploy.errors import DeployError


@dataclass(frozen=True, slots=True)
class Artifact:
    name: str
    size: int


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def artifact_dirs(root: Path, config: DeployConfig) -> list[Path]:
    """Existing directories the previous build may have left behind.

    Only the configured names directly under root are ever considered.
    """
    found: list[Path] = []
    for name in (*config.clean_dirs, config.dist_dir):
        path = root / name
        if path.is_dir() and not path.is_symlink() and path not in found:
            found.append(path)
    for pattern in config.clean_globs:
        for path in sorted(root.glob(pattern)):
            if path.is_dir() and not path.is_symlink() and path not in found:
                found.append(path)
    return found


def clean_artifacts(root: Path, config: DeployConfig) -> Result[list[Path], DeployError]:
    removed: list[Path] = []
    for path in artifact_dirs(root, config):
        try:
            shutil.rmtree(path, onexc=_remove_readonly)
        except OSError as e:
            return Err(DeployError(kind="clean_failed", message=f"failed to remove {path}: {e}"))
        removed.append(path)
    return Ok(removed)


def list_artifacts(dist_dir: Path) -> list[Artifact]:
    if not dist_dir.is_dir():
        return []
    return [
        Artifact(name=p.name, size=p.stat().st_size)
        for p in sorted(dist_dir.iterdir(), key=lambda p: p.name)
    ]


def verify_artifacts(dist_dir: Path) -> Result[list[Artifact], DeployError]:
    artifacts = list_artifacts(dist_dir)
    if not artifacts:
        return Err(
            DeployError(
                kind="build_failed",
                message="Build failed. No distribution files found.",
                hint=str(dist_dir),
            )
        )
    return Ok(artifacts)


def format_size(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
