"""Release settings (wp-tools.json).

The settings file lives in the plugin root and is merged over compiled-in
defaults: top-level keys present in the file win, absent keys fall back to
the defaults. When no file exists yet, plugin identity is discovered from
package.json and the main plugin header, and anything still missing is asked
for (or, with --yes, reported as MissingConfig).
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from wpt.platform.files import atomic_write_json

from .project import Project
from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_int,
    get_str,
    get_str_list,
    get_table,
)

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol
    from wpt.output.prompt import PromptProtocol

__all__ = [
    "DEFAULT_BUILD_COMMAND",
    "DEFAULT_EXCLUDED_FILES",
    "DEFAULT_FTP_PORT",
    "PACKAGE_MANAGERS",
    "REQUIRED_FIELDS",
    "ConfigError",
    "FtpConfig",
    "ReleaseConfig",
    "discover_config",
    "load_config",
    "read_settings",
    "save_config",
    "slugify",
]

PackageManager = Literal["npm", "yarn", "pnpm"]

PACKAGE_MANAGERS: tuple[str, ...] = ("npm", "yarn", "pnpm")
DEFAULT_BUILD_COMMAND = "npm run build"
DEFAULT_FTP_PORT = 21
DEFAULT_EXCLUDED_FILES: tuple[str, ...] = (
    "node_modules",
    ".git",
    ".github",
    ".gitignore",
    ".DS_Store",
    "package-lock.json",
    "composer.lock",
    ".phpunit.result.cache",
    "phpunit.xml",
    "tests",
    ".env",
    ".env.example",
)
REQUIRED_FIELDS: tuple[str, ...] = ("pluginName", "pluginSlug", "mainFile")

_PLUGIN_NAME_RE = re.compile(r"Plugin Name:\s*([^\r\n]+)")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Settings could not be loaded.

    Attributes:
        message: What went wrong
        path: Settings file involved, if any
        missing: Required fields that stayed empty (MissingConfig)
        hint: Suggested fix
    """

    message: str
    path: Path | None = None
    missing: tuple[str, ...] = ()
    hint: str | None = None

    @property
    def is_missing_config(self) -> bool:
        return bool(self.missing)


@dataclass(frozen=True, slots=True)
class FtpConfig:
    enabled: bool = False
    host: str = ""
    user: str = ""
    password: str = ""
    port: int = DEFAULT_FTP_PORT
    path: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> FtpConfig:
        # Passwords keep surrounding whitespace, unlike the other fields.
        password = data.get("password")
        return cls(
            enabled=bool(get_bool(data, "enabled")),
            host=get_str(data, "host") or "",
            user=get_str(data, "user") or "",
            password=password if isinstance(password, str) else "",
            port=get_int(data, "port") or DEFAULT_FTP_PORT,
            path=get_str(data, "path") or "",
        )

    def to_dict(self) -> StrDict:
        return {
            "enabled": self.enabled,
            "host": self.host,
            "user": self.user,
            "password": self.password,
            "port": self.port,
            "path": self.path,
        }


def _default_excluded() -> tuple[str, ...]:
    return DEFAULT_EXCLUDED_FILES


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Project release settings (camelCase keys on disk)."""

    plugin_name: str = ""
    plugin_slug: str = ""
    main_file: str = ""
    build_command: str | None = DEFAULT_BUILD_COMMAND
    package_manager: PackageManager = "npm"
    include_files: tuple[str, ...] = ()
    excluded_files: tuple[str, ...] = field(default_factory=_default_excluded)
    ftp: FtpConfig = field(default_factory=FtpConfig)

    @property
    def missing_fields(self) -> tuple[str, ...]:
        values = {
            "pluginName": self.plugin_name,
            "pluginSlug": self.plugin_slug,
            "mainFile": self.main_file,
        }
        return tuple(k for k in REQUIRED_FIELDS if not values[k])

    @property
    def constant_prefix(self) -> str:
        """SLUG_UPPER_SNAKE used for the `<PREFIX>_VERSION` constant."""
        return re.sub(r"[^A-Z0-9]+", "_", self.plugin_slug.upper()).strip("_")

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> ReleaseConfig:
        """Build from a parsed settings object, shallow-merged over the defaults."""
        defaults = cls()

        if "buildCommand" in data:
            build_command = get_str(data, "buildCommand")
        else:
            build_command = defaults.build_command

        package_manager = get_str(data, "packageManager") or defaults.package_manager
        if package_manager not in PACKAGE_MANAGERS:
            package_manager = "npm"

        include = get_str_list(data, "includeFiles")
        excluded = get_str_list(data, "excludedFiles")
        ftp = get_table(data, "ftpConfig")

        return cls(
            plugin_name=get_str(data, "pluginName") or "",
            plugin_slug=get_str(data, "pluginSlug") or "",
            main_file=get_str(data, "mainFile") or "",
            build_command=build_command,
            package_manager=package_manager,  # type: ignore[arg-type]
            include_files=tuple(include) if include is not None else defaults.include_files,
            excluded_files=tuple(excluded) if excluded is not None else defaults.excluded_files,
            ftp=FtpConfig.from_dict(ftp) if ftp is not None else defaults.ftp,
        )

    def to_dict(self) -> StrDict:
        return {
            "pluginName": self.plugin_name,
            "pluginSlug": self.plugin_slug,
            "mainFile": self.main_file,
            "buildCommand": self.build_command or "",
            "packageManager": self.package_manager,
            "includeFiles": list(self.include_files),
            "excludedFiles": list(self.excluded_files),
            "ftpConfig": self.ftp.to_dict(),
        }


def slugify(name: str) -> str:
    """"My Great Plugin" -> "my-great-plugin"."""
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def _title_from_slug(slug: str) -> str:
    return " ".join(word[:1].upper() + word[1:] for word in slug.split("-") if word)


def _read_json_object(path: Path) -> Result[StrDict, ConfigError]:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError(f"File not found: {path}", path=path))
    except OSError as e:
        return Err(ConfigError(f"Error reading {path}: {e}", path=path))

    try:
        data_obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"Invalid JSON in {path.name}: {e}", path=path))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ConfigError(f"{path.name} must contain a JSON object", path=path))
    return Ok(data)


def read_settings(project: Project) -> Result[ReleaseConfig, ConfigError]:
    """Parse an existing wp-tools.json and merge it over the defaults."""
    result = _read_json_object(project.settings_path)
    if isinstance(result, Err):
        return result
    return Ok(ReleaseConfig.from_dict(result.value))


def discover_config(
    project: Project,
    base: ReleaseConfig | None = None,
    console: ConsoleProtocol | None = None,
) -> ReleaseConfig:
    """Fill plugin identity and package manager by inspecting the project.

    - package.json `name` seeds the slug and a title-cased plugin name
    - yarn.lock / pnpm-lock.yaml select the package manager
    - the first root-level *.php file with `Plugin Name:` and `Version:`
      headers becomes the main file; its plugin name wins over package.json

    Values already set in `base` are never replaced, and the package manager
    is only detected for a new configuration.
    """
    fresh = base is None
    config = base or ReleaseConfig()
    name = ""
    slug = ""
    main_file = ""

    if project.package_json.exists():
        match _read_json_object(project.package_json):
            case Ok(data):
                package_name = get_str(data, "name")
                if package_name:
                    slug = slugify(package_name.rsplit("/", 1)[-1])
                    name = _title_from_slug(slug)
            case Err(e):
                if console is not None:
                    console.warning(f"Error reading package.json: {e.message}")

    if fresh and (project.root / "yarn.lock").exists():
        config = replace(config, package_manager="yarn")
    elif fresh and (project.root / "pnpm-lock.yaml").exists():
        config = replace(config, package_manager="pnpm")

    for php in sorted(project.root.glob("*.php")):
        try:
            content = php.read_text(encoding="utf-8", errors="replace")
        except OSError:
            continue
        if "Plugin Name:" not in content or "Version:" not in content:
            continue

        main_file = php.name
        m = _PLUGIN_NAME_RE.search(content)
        if m and m.group(1).strip():
            name = m.group(1).strip()
            slug = slugify(name)
        break

    return replace(
        config,
        plugin_name=config.plugin_name or name,
        plugin_slug=config.plugin_slug or slug,
        main_file=config.main_file or main_file,
    )


def _prompt_missing(config: ReleaseConfig, prompt: PromptProtocol) -> ReleaseConfig:
    if not config.plugin_name:
        config = replace(config, plugin_name=prompt.ask("Plugin name"))
    if not config.plugin_slug:
        slug = prompt.ask("Plugin slug (directory-name-format)", slugify(config.plugin_name))
        config = replace(config, plugin_slug=slugify(slug))
    if not config.main_file:
        main_file = prompt.ask("Main plugin file (e.g. my-plugin.php)", f"{config.plugin_slug}.php")
        config = replace(config, main_file=main_file)
    return config


def save_config(project: Project, config: ReleaseConfig) -> Result[Path, ConfigError]:
    path = project.settings_path
    try:
        atomic_write_json(path, config.to_dict())
    except OSError as e:
        return Err(ConfigError(f"Could not write {path}: {e}", path=path))
    return Ok(path)


def load_config(
    project: Project,
    *,
    skip_prompts: bool,
    prompt: PromptProtocol | None = None,
    console: ConsoleProtocol | None = None,
    fresh: bool = False,
) -> Result[ReleaseConfig, ConfigError]:
    """Load settings, creating wp-tools.json when needed.

    Args:
        project: Plugin project
        skip_prompts: Never ask; unresolved identity is a MissingConfig error
        prompt: Source of answers when prompting is allowed
        console: Progress output
        fresh: Ignore an existing settings file (used by `init --force`)

    Returns:
        Ok(ReleaseConfig), or Err(ConfigError). An unreadable settings file is
        an error and is never overwritten.
    """
    exists = project.settings_path.exists() and not fresh
    if exists:
        loaded = read_settings(project)
        if isinstance(loaded, Err):
            return loaded
        config = loaded.value
        if not config.missing_fields:
            return Ok(config)
        config = discover_config(project, config, console)
    else:
        config = discover_config(project, None, console)

    missing = config.missing_fields
    if missing:
        if skip_prompts or prompt is None:
            return Err(
                ConfigError(
                    "Plugin information could not be determined automatically "
                    f"(missing: {', '.join(missing)})",
                    path=project.settings_path,
                    missing=missing,
                    hint=f"Create or complete {project.settings_path.name}, or run without --yes",
                )
            )
        if console is not None:
            console.warning("Plugin information could not be determined automatically.")
        config = _prompt_missing(config, prompt)

        still_missing = config.missing_fields
        if still_missing:
            return Err(
                ConfigError(
                    f"Required settings left empty: {', '.join(still_missing)}",
                    path=project.settings_path,
                    missing=still_missing,
                )
            )

    saved = save_config(project, config)
    if isinstance(saved, Err):
        return saved
    if console is not None:
        verb = "updated" if exists else "created"
        console.success(f"Configuration file {verb}: {saved.value}")
    return Ok(config)
