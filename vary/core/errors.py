"""Process exit codes."""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Stable exit codes.

    - 1: bad package.json or conflicting flags
    - 2: unsupported napi CLI version or host, missing npm token
    - 3: an external command failed or build output is missing
    - 5: a file the package needs (index.js, LICENSE) is missing
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5
