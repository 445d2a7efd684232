"""Package installs and the frontend build.

All three steps are best effort: a failing install or build is reported and
the release goes on to build the archive with whatever is on disk.
"""

from __future__ import annotations

import shlex
from typing import TYPE_CHECKING

from wpt.core.config import ReleaseConfig
from wpt.core.outcome import Outcome
from wpt.core.project import Project
from wpt.core.result import Err, Ok
from wpt.platform.process import CommandRunner

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol

__all__ = [
    "COMPOSER_INSTALL",
    "build_frontend",
    "install_command",
    "install_composer",
    "install_packages",
]

COMPOSER_INSTALL = ["composer", "install", "--no-dev", "--optimize-autoloader"]

_INSTALL_COMMANDS: dict[str, list[str]] = {
    "npm": ["npm", "install"],
    "yarn": ["yarn", "install"],
    "pnpm": ["pnpm", "install"],
}


def install_command(package_manager: str) -> list[str]:
    """Install command for a package manager (npm for anything unknown)."""
    return list(_INSTALL_COMMANDS.get(package_manager, _INSTALL_COMMANDS["npm"]))


def install_packages(
    project: Project,
    config: ReleaseConfig,
    *,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Outcome:
    pm = config.package_manager
    console.info(f"Installing {pm.upper()} packages...")
    cmd = install_command(pm)
    console.command(cmd)
    match runner.run(cmd, cwd=project.root):
        case Ok(_):
            console.success(f"{pm.upper()} packages installed.")
            return Outcome.success("install")
        case Err(e):
            msg = f"Error installing {pm.upper()} packages ({e}). Continuing."
            console.warning(msg)
            return Outcome.failure("install", msg)


def install_composer(
    project: Project,
    *,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Outcome:
    """`composer install --no-dev` when the project has a composer.json."""
    if not project.composer_json.exists():
        return Outcome.skip("composer")

    console.info("Installing Composer packages...")
    console.command(COMPOSER_INSTALL)
    match runner.run(list(COMPOSER_INSTALL), cwd=project.root):
        case Ok(_):
            console.success("Composer packages installed successfully.")
            return Outcome.success("composer")
        case Err(e):
            msg = f"Error installing Composer packages ({e})."
            console.warning(msg)
            return Outcome.failure("composer", msg)


def build_frontend(
    project: Project,
    config: ReleaseConfig,
    *,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Outcome:
    if not config.build_command:
        return Outcome.skip("build")

    try:
        cmd = shlex.split(config.build_command)
    except ValueError as e:
        msg = f"Invalid build command {config.build_command!r}: {e}"
        console.warning(msg)
        return Outcome.failure("build", msg)
    if not cmd:
        return Outcome.skip("build")

    console.info("Building frontend code...")
    console.command(cmd)
    match runner.run(cmd, cwd=project.root):
        case Ok(_):
            console.success("Frontend build finished.")
            return Outcome.success("build")
        case Err(e):
            msg = f"Error building frontend code ({e})."
            console.warning(msg)
            return Outcome.failure("build", msg)
