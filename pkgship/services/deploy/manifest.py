"""Version extraction from the project manifest.

The version is read with a fixed-format text match rather than a TOML parse:
the first line of the form ``version = "X.Y.Z"`` wins, whatever table it is in.
"""

from __future__ import annotations

import re
from pathlib import Path

from pkgship.core.result import Err, Ok, Result
from pkgship.services.deploy.errors import DeployError

_VERSION_LINE = re.compile(r'^version = "([^"]*)"')


def read_manifest_version(path: Path) -> Result[str, DeployError]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(
            DeployError(
                kind="manifest_missing",
                message=f"{path.name} not found. Please run this from the project directory.",
            )
        )
    except OSError as e:
        return Err(DeployError(kind="manifest_missing", message=f"failed to read {path.name}: {e}"))

    for line in text.splitlines():
        m = _VERSION_LINE.match(line)
        if m is not None:
            return Ok(m.group(1))

    return Err(
        DeployError(
            kind="invalid_version",
            message=f"no version line found in {path.name}",
            hint='Expected a line like: version = "1.2.3"',
        )
    )
