"""Error codes for CLI exit status.

Every verb exits with one of these codes. A release that finishes with
warnings still exits with OK; only the fatal conditions below change it.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Success (warnings allowed)
    - 1: User error (unknown verb, bad input)
    - 2: Config error (missing plugin identity, unreadable settings, invalid version)
    - 3: Archive error (the release zip could not be produced)
    - 5: I/O error (credential store not writable)
    """

    OK = 0
    USER_ERROR = 1
    CONFIG_ERROR = 2
    ARCHIVE_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK
