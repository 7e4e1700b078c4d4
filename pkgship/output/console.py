"""Console output abstraction.

Status lines are the only "log" the deploy command produces. Services write
through ConsoleProtocol so tests can capture output with MockConsole while
the real command renders colored tags with Rich.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

__all__ = [
    "Style",
    "ConsoleProtocol",
    "RichConsole",
    "MockConsole",
    "OutputRecord",
]


class Style(Enum):
    """Text styles for console output."""

    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()
    HEADER = auto()


class ConsoleProtocol(Protocol):
    """Protocol for styled status output."""

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        """Print a message with optional styling."""
        ...

    def success(self, message: str) -> None:
        """Print a ``[SUCCESS]`` line."""
        ...

    def error(self, message: str) -> None:
        """Print an ``[ERROR]`` line."""
        ...

    def warning(self, message: str) -> None:
        """Print a ``[WARNING]`` line."""
        ...

    def info(self, message: str) -> None:
        """Print an ``[INFO]`` line."""
        ...

    def header(self, message: str) -> None:
        """Print a section header."""
        ...

    def newline(self) -> None:
        """Print an empty line."""
        ...


class RichConsole:
    """Production console backed by Rich."""

    def __init__(self) -> None:
        from rich.console import Console

        self._console = Console(highlight=False)
        self._style_map = {
            Style.DEFAULT: "",
            Style.SUCCESS: "green",
            Style.ERROR: "red",
            Style.WARNING: "yellow",
            Style.INFO: "blue",
            Style.DIM: "dim",
            Style.HEADER: "bold",
        }

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        rich_style = self._style_map.get(style, "")
        if rich_style:
            self._console.print(message, style=rich_style, markup=False)
        else:
            self._console.print(message, markup=False)

    def _tagged(self, tag: str, color: str, message: str) -> None:
        from rich.text import Text

        line = Text()
        line.append(f"[{tag}]", style=color)
        line.append(f" {message}")
        self._console.print(line)

    def success(self, message: str) -> None:
        self._tagged("SUCCESS", "green", message)

    def error(self, message: str) -> None:
        self._tagged("ERROR", "red", message)

    def warning(self, message: str) -> None:
        self._tagged("WARNING", "bold yellow", message)

    def info(self, message: str) -> None:
        self._tagged("INFO", "blue", message)

    def header(self, message: str) -> None:
        self._console.print()
        self._console.print(message, style="bold", markup=False)

    def newline(self) -> None:
        self._console.print()


@dataclass
class OutputRecord:
    """A single output record for MockConsole."""

    message: str
    style: Style


def _empty_outputs() -> list[OutputRecord]:
    return []


@dataclass
class MockConsole:
    """Console that captures output for tests."""

    outputs: list[OutputRecord] = field(default_factory=_empty_outputs)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def success(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[SUCCESS] {message}", Style.SUCCESS))

    def error(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[ERROR] {message}", Style.ERROR))

    def warning(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[WARNING] {message}", Style.WARNING))

    def info(self, message: str) -> None:
        self.outputs.append(OutputRecord(f"[INFO] {message}", Style.INFO))

    def header(self, message: str) -> None:
        self.outputs.append(OutputRecord(message, Style.HEADER))

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    # Test helpers

    def clear(self) -> None:
        self.outputs.clear()

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style == Style.ERROR for o in self.outputs)

    def has_warning(self) -> bool:
        return any(o.style == Style.WARNING for o in self.outputs)

    def has_success(self) -> bool:
        return any(o.style == Style.SUCCESS for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
