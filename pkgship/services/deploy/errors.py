from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

DeployErrorKind = Literal[
    "manifest_missing",
    "tool_missing",
    "config_invalid",
    "invalid_version",
    "invalid_choice",
    "tool_failed",
    "clean_failed",
    "build_failed",
]


@dataclass(frozen=True, slots=True)
class DeployError:
    kind: DeployErrorKind
    message: str
    hint: str | None = None
    returncode: int | None = None
