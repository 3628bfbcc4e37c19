"""Exit codes for pipeline runs.

A pipeline run reports its final status to the hosting platform through
the process exit code, so these values must stay stable:
- 0: Run succeeded, or the trigger did not match and nothing ran
- 1: User error (bad event, invalid option)
- 2: Environment error (toolchain or CLI missing, bad config)
- 3: Build error (compilation failed, lint diagnostics)
- 4: Network error (remote unreachable)
- 5: I/O error (artifact missing, copy failed)
- 6: Release error (token missing, release tool failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes."""

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    NETWORK_ERROR = 4
    IO_ERROR = 5
    RELEASE_ERROR = 6

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
