"""Core domain types and logic."""

from .errors import ErrorCode
from .outcome import Outcome, ReleaseReport
from .project import Project, detect_project
from .result import Err, Ok, Result, is_err, is_ok
from .version import InvalidVersion, ReleaseType, Version, next_version, parse_version

__all__ = [
    # errors
    "ErrorCode",
    # outcome
    "Outcome",
    "ReleaseReport",
    # project
    "Project",
    "detect_project",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
    # version
    "InvalidVersion",
    "ReleaseType",
    "Version",
    "next_version",
    "parse_version",
]
