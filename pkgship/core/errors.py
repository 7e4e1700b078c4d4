"""Process exit codes for the pkgship command.

Cancelling at a confirmation prompt is not a failure and exits with OK.
External tool failures do not appear here: they exit with the tool's own
return code.
"""

from enum import IntEnum

__all__ = ["ErrorCode", "INTERRUPTED_EXIT_CODE"]

# Conventional shell status for a process stopped by SIGINT.
INTERRUPTED_EXIT_CODE = 130


class ErrorCode(IntEnum):
    """Exit codes for the deploy command.

    - 0: Success, or the user declined a confirmation
    - 1: Precondition failure, invalid input, or missing build artifacts
    """

    OK = 0
    USER_ERROR = 1
