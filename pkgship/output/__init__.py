"""Output and prompt abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .prompt import (
    PrompterProtocol,
    ScriptedPrompter,
    TerminalPrompter,
    is_yes,
)

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PrompterProtocol",
    "RichConsole",
    "ScriptedPrompter",
    "Style",
    "TerminalPrompter",
    "is_yes",
]
