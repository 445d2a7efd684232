"""Plugin project paths.

A project is the plugin root directory the tool runs in (the current working
directory by default). Everything the tool reads or writes inside it is
addressed through this class.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = [
    "ARCHIVE_SUFFIX",
    "SCRATCH_PREFIX",
    "SETTINGS_FILE",
    "Project",
    "detect_project",
]

SETTINGS_FILE = "wp-tools.json"
SCRATCH_PREFIX = ".temp-release-"
ARCHIVE_SUFFIX = ".zip"


@dataclass(frozen=True, slots=True)
class Project:
    """A WordPress plugin checkout.

    The root contains:
    - wp-tools.json settings (created by `init` or on first release)
    - package.json / composer.json manifests (optional)
    - the main plugin file with the `Plugin Name:` header
    """

    root: Path

    @property
    def settings_path(self) -> Path:
        return self.root / SETTINGS_FILE

    @property
    def package_json(self) -> Path:
        return self.root / "package.json"

    @property
    def composer_json(self) -> Path:
        return self.root / "composer.json"

    @property
    def env_file(self) -> Path:
        return self.root / ".env"

    @property
    def name(self) -> str:
        return self.root.name

    def path(self, relative: str) -> Path:
        return self.root / relative

    def archive_path(self, slug: str) -> Path:
        """Path to the release archive (<slug>.zip at the root)."""
        return self.root / f"{slug}{ARCHIVE_SUFFIX}"

    def scratch_dir(self, version: str) -> Path:
        """Staging directory used while building the archive."""
        return self.root / f"{SCRATCH_PREFIX}{version}"


def detect_project(root: Path | None = None) -> Project:
    """Project rooted at `root`, $WP_TOOLS_ROOT, or the current directory."""
    if root is None:
        env = os.environ.get("WP_TOOLS_ROOT")
        root = Path(env) if env else Path.cwd()
    return Project(root=root.expanduser().resolve())
