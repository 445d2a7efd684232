from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .result import Err, Ok, Result

__all__ = [
    "DEFAULT_VERSION",
    "InvalidVersion",
    "ReleaseType",
    "Version",
    "next_version",
    "parse_release_type",
    "parse_version",
]

_VERSION_RE = re.compile(r"^(\d+)\.(\d+)\.(\d+)$")


class ReleaseType(str, Enum):
    patch = "patch"
    minor = "minor"
    major = "major"


@dataclass(frozen=True, slots=True)
class InvalidVersion:
    """Current version is not a clean MAJOR.MINOR.PATCH triple."""

    value: str

    @property
    def message(self) -> str:
        return f"Invalid version {self.value!r} (expected MAJOR.MINOR.PATCH)"


@dataclass(frozen=True, slots=True, order=True)
class Version:
    major: int
    minor: int
    patch: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump(self, kind: ReleaseType) -> Version:
        return next_version(self, kind)


DEFAULT_VERSION = Version(0, 1, 0)


def parse_version(text: str) -> Result[Version, InvalidVersion]:
    m = _VERSION_RE.match(text.strip())
    if m is None:
        return Err(InvalidVersion(text))
    return Ok(Version(int(m.group(1)), int(m.group(2)), int(m.group(3))))


def parse_release_type(word: str | None) -> ReleaseType:
    """Map a CLI word to a ReleaseType; anything unrecognised is a patch."""
    if word is None:
        return ReleaseType.patch
    try:
        return ReleaseType(word.strip().lower())
    except ValueError:
        return ReleaseType.patch


def next_version(current: Version, kind: ReleaseType | str) -> Version:
    match parse_release_type(kind):
        case ReleaseType.major:
            return Version(current.major + 1, 0, 0)
        case ReleaseType.minor:
            return Version(current.major, current.minor + 1, 0)
        case _:
            return Version(current.major, current.minor, current.patch + 1)
