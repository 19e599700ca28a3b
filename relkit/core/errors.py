"""Error codes for CLI exit status.

Every release command reports its outcome through the process exit status.
A fatal abort inside the pipeline is mapped to one of these codes by the CLI
layer only; nothing below it exits the process.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad input, operator declined, unresolved snapshot deps)
    - 2: Environment error (not a repository, dirty tree, missing state, config)
    - 3: Build error (tests failed)
    - 4: VCS error (a git command failed)
    - 5: I/O error (version file or state file could not be written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    VCS_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK
