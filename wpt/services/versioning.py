"""Version synchronisation across package.json, composer.json and the plugin header.

The new version is written to up to three files:

- package.json / composer.json: the `version` property is set (other keys
  and their order are preserved)
- the main plugin file: the first `Version:` header field, and the
  `<SLUG>_VERSION` constant when one is defined

Only the first `Version:` field is rewritten; a file with several of them
keeps the later ones unchanged.

Changed files are then committed to git. Every failure here is a warning:
the release continues with whatever was written.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import TYPE_CHECKING

from wpt.core.config import ReleaseConfig
from wpt.core.outcome import Outcome
from wpt.core.project import Project
from wpt.core.result import Err, Ok, Result
from wpt.core.structured import as_str_dict, get_str
from wpt.core.version import DEFAULT_VERSION
from wpt.git.repository import Repository, commit_message
from wpt.platform.files import atomic_write_json, atomic_write_text

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol

__all__ = [
    "HEADER_VERSION_RE",
    "WriteError",
    "apply_version",
    "constant_patterns",
    "read_current_version",
    "rewrite_plugin_header",
    "rewrite_version_field",
    "update_manifest",
]

HEADER_VERSION_RE = re.compile(r"Version:\s*[\d.]+")
_HEADER_CAPTURE_RE = re.compile(r"Version:\s*([^\s*]+)")


@dataclass(frozen=True, slots=True)
class WriteError:
    path: Path
    message: str


def rewrite_version_field(
    content: str,
    pattern: re.Pattern[str],
    replacement: str,
) -> tuple[str, bool]:
    """Replace the first match of `pattern` in `content`.

    `replacement` is a `re` template (group references allowed).

    Returns:
        (new content, whether a match was replaced)
    """
    new_content, count = pattern.subn(replacement, content, count=1)
    return new_content, count > 0


def constant_patterns(prefix: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    """Patterns for `define('<PREFIX>_VERSION', 'x.y.z');` and `const <PREFIX>_VERSION = 'x.y.z';`.

    Group `head` ends right before the version literal, group `tail` starts
    right after it, so quoting and spacing survive the rewrite.
    """
    name = re.escape(f"{prefix}_VERSION")
    define = re.compile(
        rf"""(?P<head>define\(\s*(?P<q1>['"]){name}(?P=q1)\s*,\s*(?P<q2>['"]))[\d.]+(?P<tail>(?P=q2)\s*\))"""
    )
    const = re.compile(rf"""(?P<head>\bconst\s+{name}\s*=\s*(?P<q>['"]))[\d.]+(?P<tail>(?P=q))""")
    return define, const


def rewrite_plugin_header(content: str, prefix: str, version: str) -> tuple[str, bool]:
    """Rewrite the header `Version:` field and, when present, the version constant.

    The constant is only touched when the header field was found.
    """
    content, found = rewrite_version_field(content, HEADER_VERSION_RE, f"Version: {version}")
    if not found:
        return content, False

    if prefix:
        for pattern in constant_patterns(prefix):
            content, _ = rewrite_version_field(content, pattern, rf"\g<head>{version}\g<tail>")
    return content, True


def read_current_version(project: Project, config: ReleaseConfig) -> str:
    """Version the release starts from.

    package.json `version` when present, else the main file's `Version:`
    header, else 0.1.0. The text is returned unparsed.
    """
    if project.package_json.exists():
        try:
            data = as_str_dict(json.loads(project.package_json.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError):
            data = None
        if data is not None:
            version = get_str(data, "version")
            if version:
                return version

    if config.main_file:
        main = project.path(config.main_file)
        try:
            m = _HEADER_CAPTURE_RE.search(main.read_text(encoding="utf-8"))
        except OSError:
            m = None
        if m:
            return m.group(1)

    return str(DEFAULT_VERSION)


def update_manifest(path: Path, version: str) -> Result[bool, WriteError]:
    """Set `version` in a JSON manifest. Ok(False) when the file does not exist."""
    if not path.exists():
        return Ok(False)
    try:
        data = as_str_dict(json.loads(path.read_text(encoding="utf-8")))
    except json.JSONDecodeError as e:
        return Err(WriteError(path, f"Invalid JSON in {path.name}: {e}"))
    except OSError as e:
        return Err(WriteError(path, f"Error reading {path.name}: {e}"))
    if data is None:
        return Err(WriteError(path, f"{path.name} must contain a JSON object"))

    data["version"] = version
    try:
        atomic_write_json(path, data)
    except OSError as e:
        return Err(WriteError(path, f"Error writing {path.name}: {e}"))
    return Ok(True)


def _update_plugin_file(path: Path, prefix: str, version: str) -> Result[bool, WriteError]:
    try:
        with path.open(encoding="utf-8", newline="") as fh:
            content = fh.read()
    except OSError as e:
        return Err(WriteError(path, f"Error reading {path.name}: {e}"))

    new_content, found = rewrite_plugin_header(content, prefix, version)
    if not found:
        return Ok(False)

    try:
        atomic_write_text(path, new_content)
    except OSError as e:
        return Err(WriteError(path, f"Error writing {path.name}: {e}"))
    return Ok(True)


def apply_version(
    project: Project,
    config: ReleaseConfig,
    version: str,
    *,
    repo: Repository,
    console: ConsoleProtocol,
) -> Outcome:
    """Write `version` everywhere it lives, then commit the changed files.

    Returns an Outcome whose `changed` lists the rewritten files. Nothing to
    update is not an error (ok, no changes).
    """
    outcome = Outcome.success("version")
    changed: list[str] = []

    for manifest in (project.package_json, project.composer_json):
        match update_manifest(manifest, version):
            case Ok(True):
                changed.append(manifest.name)
                console.success(f"{manifest.name} updated: {version}")
            case Ok(False):
                pass
            case Err(e):
                console.warning(e.message)
                outcome = outcome.with_warning(e.message, failed=True)

    main = project.path(config.main_file)
    if main.is_file():
        match _update_plugin_file(main, config.constant_prefix, version):
            case Ok(True):
                changed.append(config.main_file)
                console.success(f"Plugin file updated: {version}")
            case Ok(False):
                msg = f"Version header not found in {config.main_file}"
                console.warning(msg)
                outcome = outcome.with_warning(msg)
            case Err(e):
                console.warning(e.message)
                outcome = outcome.with_warning(e.message, failed=True)
    else:
        msg = f"Main plugin file not found: {config.main_file}"
        console.warning(msg)
        outcome = outcome.with_warning(msg)

    if not changed:
        console.info("No version files were updated.")
        return outcome

    outcome = replace(outcome, changed=tuple(changed))

    if not repo.is_repo():
        msg = "Not a git repository, version bump not committed"
        console.warning(msg)
        return outcome.with_warning(msg)

    console.info("Performing Git commit operation...")
    match repo.commit_files(changed, commit_message(version)):
        case Ok(_):
            console.success("Git commit operation successful.")
        case Err(e):
            msg = f"{e.message}; version edits were kept"
            console.warning(msg)
            outcome = outcome.with_warning(msg, failed=True)

    return outcome
