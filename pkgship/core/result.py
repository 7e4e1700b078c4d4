"""Result type for explicit error handling.

Every step of the deploy workflow that touches the filesystem or an external
tool returns a Result instead of raising. The orchestrator stops at the first
Err it sees, which is what makes the fail-fast behavior explicit.

Usage:
    match read_manifest_version(path):
        case Ok(version):
            console.info(f"Current version: {version}")
        case Err(error):
            console.error(error.message)
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["Ok", "Err", "Result"]


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful result.

    Attributes:
        value: The success value.
    """

    value: T

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """A failed result.

    Attributes:
        error: The error value.
    """

    error: E

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
