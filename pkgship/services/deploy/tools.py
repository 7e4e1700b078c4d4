"""Wrappers around the packaging tool.

The tool is treated as an opaque collaborator: version bumps, builds and
uploads are whatever ``<tool> version|build|publish`` do. Credentials for the
package index are entirely the tool's business.
"""

from __future__ import annotations

import sys
from pathlib import Path

from pkgship.core.result import Err, Ok, Result
from pkgship.platform.process import ProcessError, run, run_streaming, which
from pkgship.services.deploy.errors import DeployError
from pkgship.services.deploy.semver import BumpChoice

NOT_INSTALLED = "not installed"


def _tool_failed(error: ProcessError) -> DeployError:
    if error.spawn_failed:
        return DeployError(
            kind="tool_missing",
            message=f"could not start {error.command[0]}: {error.stderr}",
        )
    return DeployError(
        kind="tool_failed",
        message=str(error),
        returncode=error.returncode,
    )


class PackagingTool:
    """Runs packaging subcommands in the project root, streaming their output."""

    def __init__(self, root: Path, executable: str = "poetry") -> None:
        self.root = root
        self.executable = executable

    def is_available(self) -> bool:
        return which(self.executable) is not None

    def bump(self, kind: BumpChoice) -> Result[None, DeployError]:
        if kind is BumpChoice.SKIP:
            return Ok(None)
        return self._call(["version", kind.value])

    def build(self) -> Result[None, DeployError]:
        return self._call(["build"])

    def publish(self) -> Result[None, DeployError]:
        return self._call(["publish"])

    def _call(self, args: list[str]) -> Result[None, DeployError]:
        result = run_streaming([self.executable, *args], cwd=self.root)
        if isinstance(result, Err):
            return Err(_tool_failed(result.error))
        return Ok(None)


def project_python() -> str:
    """The interpreter the project is installed into: ``python`` on PATH.

    Falls back to the interpreter running pkgship.
    """
    return which("python") or which("python3") or sys.executable


def installed_version(import_name: str, *, cwd: Path) -> str:
    """Best-effort ``__version__`` of the package importable by ``python`` on PATH."""
    if not all(part.isidentifier() for part in import_name.split(".")):
        return NOT_INSTALLED
    result = run(
        [project_python(), "-c", f"import {import_name}; print({import_name}.__version__)"],
        cwd=cwd,
    )
    if isinstance(result, Err):
        return NOT_INSTALLED
    return result.value.strip() or NOT_INSTALLED
