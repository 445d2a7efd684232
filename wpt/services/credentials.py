"""FTP credential sources.

Credentials come from three places, highest precedence first:

1. the user-scoped credential store written by `set-ftp` / `ftp-disable`
   (<user-config-dir>/credentials.json, one table per project)
2. environment variables (FTP_HOST, FTP_USER, FTP_PASS, FTP_PORT,
   UPDATE_SERVER_PATH), with a project `.env` file filling in variables the
   process environment does not set
3. the `ftpConfig` block of wp-tools.json

The store is injected as a CredentialProvider so release logic never touches
the real user directory in tests.
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from wpt.core.result import Err, Ok, Result
from wpt.core.structured import StrDict, as_str_dict, get_table
from wpt.platform.files import atomic_write_json
from wpt.platform.paths import user_config_dir

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol

__all__ = [
    "ENV_KEYS",
    "FTP_KEYS",
    "CredentialError",
    "CredentialValue",
    "CredentialProvider",
    "JsonCredentialStore",
    "MemoryCredentialStore",
    "credential_store_path",
    "load_env",
    "parse_dotenv",
]

FTP_KEYS: tuple[str, ...] = (
    "ftp.host",
    "ftp.user",
    "ftp.password",
    "ftp.port",
    "ftp.path",
    "ftp.enabled",
)

# Credential key -> environment variable
ENV_KEYS: dict[str, str] = {
    "ftp.host": "FTP_HOST",
    "ftp.user": "FTP_USER",
    "ftp.password": "FTP_PASS",
    "ftp.port": "FTP_PORT",
    "ftp.path": "UPDATE_SERVER_PATH",
}

type CredentialValue = str | int | bool


@dataclass(frozen=True, slots=True)
class CredentialError:
    message: str
    path: Path | None = None


class CredentialProvider(Protocol):
    def get(self, key: str) -> CredentialValue | None: ...

    def set(self, key: str, value: CredentialValue) -> Result[None, CredentialError]: ...

    def update(self, values: Mapping[str, CredentialValue]) -> Result[None, CredentialError]:
        """Set several keys in one write."""
        ...


def credential_store_path() -> Path:
    return user_config_dir() / "credentials.json"


class JsonCredentialStore:
    """Credential store backed by a JSON file in the user config directory.

    Layout:
        {"projects": {"<project>": {"ftp.host": "...", "ftp.enabled": true}}}

    Args:
        project: Project identity (the resolved project directory)
        path: Store file (defaults to credential_store_path())
    """

    def __init__(self, project: str, path: Path | None = None) -> None:
        self.project = project
        self.path = path or credential_store_path()

    def _read(self) -> Result[StrDict, CredentialError]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Ok({})
        except OSError as e:
            return Err(CredentialError(f"Error reading {self.path}: {e}", path=self.path))

        try:
            data = as_str_dict(json.loads(raw))
        except json.JSONDecodeError as e:
            return Err(CredentialError(f"Invalid JSON in {self.path}: {e}", path=self.path))
        if data is None:
            return Err(CredentialError(f"{self.path} must contain a JSON object", path=self.path))
        return Ok(data)

    def _project_table(self, data: StrDict) -> StrDict:
        projects = get_table(data, "projects") or {}
        return get_table(projects, self.project) or {}

    def get(self, key: str) -> CredentialValue | None:
        """Stored value, or None when unset or the store is unreadable."""
        data = self._read()
        if isinstance(data, Err):
            return None
        value = self._project_table(data.value).get(key)
        if isinstance(value, str | int | bool):
            return value
        return None

    def set(self, key: str, value: CredentialValue) -> Result[None, CredentialError]:
        return self.update({key: value})

    def update(self, values: Mapping[str, CredentialValue]) -> Result[None, CredentialError]:
        data = self._read()
        if isinstance(data, Err):
            return data

        root = data.value
        projects = get_table(root, "projects") or {}
        table = dict(self._project_table(root))
        table.update(values)
        projects[self.project] = table
        root["projects"] = projects

        try:
            # Owner-only: the store holds passwords.
            atomic_write_json(self.path, root, mode=0o600)
        except OSError as e:
            return Err(CredentialError(f"Could not write {self.path}: {e}", path=self.path))
        return Ok(None)


def _empty_values() -> dict[str, CredentialValue]:
    return {}


@dataclass
class MemoryCredentialStore:
    """In-memory CredentialProvider for tests."""

    values: dict[str, CredentialValue] = field(default_factory=_empty_values)
    writes: int = 0

    def get(self, key: str) -> CredentialValue | None:
        return self.values.get(key)

    def set(self, key: str, value: CredentialValue) -> Result[None, CredentialError]:
        return self.update({key: value})

    def update(self, values: Mapping[str, CredentialValue]) -> Result[None, CredentialError]:
        self.values.update(values)
        self.writes += 1
        return Ok(None)


# KEY=VAL lines; `export KEY=VAL` is tolerated, matching quotes are stripped.
_ENV_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)\s*=\s*(.*?)\s*$")


def parse_dotenv(text: str) -> dict[str, str]:
    env: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        m = _ENV_LINE.match(stripped)
        if not m:
            continue
        key, value = m.group(1), m.group(2)
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        env[key] = value
    return env


def load_env(
    env_file: Path | None,
    environ: Mapping[str, str] | None = None,
    console: ConsoleProtocol | None = None,
) -> dict[str, str]:
    """Process environment overlaid on the values of `env_file` (if it exists)."""
    env: dict[str, str] = {}
    if env_file is not None and env_file.exists():
        try:
            env.update(parse_dotenv(env_file.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            if console is not None:
                console.warning(f"Ignoring {env_file.name}: {e}")
    env.update(os.environ if environ is None else environ)
    return env
