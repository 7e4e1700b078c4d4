from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from pkgship.core.result import Err, Ok, Result
from pkgship.services.deploy.errors import DeployError


_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class BumpChoice(Enum):
    PATCH = "patch"
    MINOR = "minor"
    MAJOR = "major"
    SKIP = "skip"

    @property
    def menu_key(self) -> str:
        return _MENU_KEYS[self]


_MENU_KEYS: dict[BumpChoice, str] = {
    BumpChoice.PATCH: "1",
    BumpChoice.MINOR: "2",
    BumpChoice.MAJOR: "3",
    BumpChoice.SKIP: "4",
}


def parse_choice(key: str) -> BumpChoice | None:
    """Map a menu keystroke to a choice; None for anything outside 1-4."""
    for choice, k in _MENU_KEYS.items():
        if key == k:
            return choice
    return None


@dataclass(frozen=True, slots=True, order=True)
class SemVer:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: BumpChoice) -> SemVer:
        match kind:
            case BumpChoice.MAJOR:
                return SemVer(self.major + 1, 0, 0)
            case BumpChoice.MINOR:
                return SemVer(self.major, self.minor + 1, 0)
            case BumpChoice.PATCH:
                return SemVer(self.major, self.minor, self.patch + 1)
            case BumpChoice.SKIP:
                return self


@dataclass(frozen=True, slots=True)
class NextVersions:
    patch: SemVer
    minor: SemVer
    major: SemVer


def next_versions(current: SemVer) -> NextVersions:
    return NextVersions(
        patch=current.bump(BumpChoice.PATCH),
        minor=current.bump(BumpChoice.MINOR),
        major=current.bump(BumpChoice.MAJOR),
    )


def parse_version(text: str) -> Result[SemVer, DeployError]:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(
            DeployError(
                kind="invalid_version",
                message=f"invalid version: {text!r}",
                hint="Expected MAJOR.MINOR.PATCH with numeric components",
            )
        )
    return Ok(SemVer(int(m.group(1)), int(m.group(2)), int(m.group(3))))
