"""Error presentation for the deploy command.

Centralized error formatting and exit code mapping for consistent UX.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pkgship.core.errors import ErrorCode
from pkgship.output.console import Style
from pkgship.services.deploy.errors import DeployError

if TYPE_CHECKING:
    from pkgship.output.console import ConsoleProtocol

__all__ = ["print_deploy_error", "deploy_error_exit_code"]


def print_deploy_error(error: DeployError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def deploy_error_exit_code(error: DeployError) -> int:
    """Exit code for a failed run.

    A failing external tool exits with the tool's own code, like a shell
    script running under ``set -e``.
    """
    match error.kind:
        case "tool_failed" if error.returncode is not None and error.returncode > 0:
            return error.returncode
        case _:
            return int(ErrorCode.USER_ERROR)
