"""Interactive input.

The deploy workflow asks single-keystroke questions: a menu choice and a few
y/N confirmations. Anything other than a case-insensitive ``y`` is a "no".
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from typing import Protocol

import typer

__all__ = [
    "PrompterProtocol",
    "TerminalPrompter",
    "ScriptedPrompter",
    "is_interactive_terminal",
    "is_yes",
]


def is_interactive_terminal() -> bool:
    return bool(sys.stdin.isatty() and sys.stdout.isatty())


def is_yes(answer: str) -> bool:
    return answer.strip().lower() == "y"


class PrompterProtocol(Protocol):
    def key(self, message: str) -> str:
        """Show message and return one keystroke (empty string on EOF/Enter)."""
        ...


class TerminalPrompter:
    """Reads one keystroke from the terminal.

    When stdin is not a terminal (piped answers), one line is read instead and
    its first character is used.
    """

    def key(self, message: str) -> str:
        typer.echo(message, nl=False)
        if not is_interactive_terminal():
            line = sys.stdin.readline()
            typer.echo()
            return line.strip()[:1]

        try:
            ch = typer.getchar(echo=False)
        except EOFError:
            ch = ""
        if ch in ("\r", "\n"):
            ch = ""
        typer.echo(ch)
        return ch


def _empty_answers() -> list[str]:
    return []


@dataclass
class ScriptedPrompter:
    """Prompter that replays canned answers for tests.

    Running out of answers behaves like EOF (an empty answer).
    """

    answers: list[str] = field(default_factory=_empty_answers)
    asked: list[str] = field(default_factory=_empty_answers)

    def key(self, message: str) -> str:
        self.asked.append(message)
        if not self.answers:
            return ""
        return self.answers.pop(0)
