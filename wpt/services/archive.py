"""Release archive staging.

The archive is built in two phases:

1. Every included entry is copied into a scratch directory
   (`.temp-release-<version>` in the plugin root), skipping excluded names.
   Directories are mirrored with rsync when available and with a recursive
   copy otherwise; both paths prune excluded names at every depth.
2. The scratch directory is zipped into `<slug>.zip` at the plugin root with
   member paths relative to the scratch directory, so extracting the archive
   reproduces the plugin layout without a wrapper folder.

The scratch directory is removed on every exit path. A partially written
archive is deleted when compression fails.
"""

from __future__ import annotations

import fnmatch
import os
import shutil
import stat
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import TYPE_CHECKING
from zipfile import ZIP_DEFLATED, ZipFile

from wpt.core.config import ReleaseConfig
from wpt.core.project import SCRATCH_PREFIX, SETTINGS_FILE, Project
from wpt.core.result import Err, Ok, Result
from wpt.platform.process import CommandRunner

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol

__all__ = [
    "ArchiveError",
    "StagedEntry",
    "build_archive",
    "is_excluded",
    "plan_entries",
    "resolve_includes",
]

VENDOR_DIR = "vendor"
VENDOR_LOADER = "autoload.php"

_GLOB_CHARS = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class ArchiveError:
    """Staging or compression failed (ZipError)."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class StagedEntry:
    """One (source, destination) pair of the archive manifest."""

    source: Path
    dest: str

    @property
    def name(self) -> str:
        return PurePosixPath(self.dest).name


def _remove_readonly(_func: Callable[[str], object], path: str, exc: BaseException) -> None:
    """Handle read-only files on Windows (e.g. .git/objects/pack/*.idx)."""
    if isinstance(exc, PermissionError):
        os.chmod(path, stat.S_IWRITE)
        os.unlink(path)
    else:
        raise exc


def is_excluded(name: str, patterns: Iterable[str]) -> bool:
    """True if a base name matches any exclusion (literal or fnmatch pattern)."""
    return any(name == p or fnmatch.fnmatchcase(name, p) for p in patterns)


def _is_tool_artifact(name: str, slug: str) -> bool:
    return name == SETTINGS_FILE or name == f"{slug}.zip" or name.startswith(SCRATCH_PREFIX)


def _normalize(entry: str) -> str | None:
    p = PurePosixPath(entry.replace("\\", "/").strip())
    if p.is_absolute() or ".." in p.parts or str(p) in {"", "."}:
        return None
    return p.as_posix()


def resolve_includes(project: Project, config: ReleaseConfig) -> list[str]:
    """Ordered include list, relative to the plugin root.

    `includeFiles` is used as given (glob patterns are expanded in sorted
    order); an empty list means every top-level entry of the root. The main
    plugin file is appended when missing. Duplicates are dropped.
    """
    entries: list[str] = []
    if config.include_files:
        for pattern in config.include_files:
            if _GLOB_CHARS.intersection(pattern):
                matches = sorted(
                    p.relative_to(project.root).as_posix() for p in project.root.glob(pattern)
                )
                entries.extend(matches or [pattern])
            else:
                entries.append(pattern)
    else:
        entries = sorted(p.name for p in project.root.iterdir())

    if config.main_file:
        entries.append(config.main_file)

    seen: set[str] = set()
    out: list[str] = []
    for entry in entries:
        normalized = _normalize(entry) or entry
        if normalized in seen:
            continue
        seen.add(normalized)
        out.append(normalized)
    return out


def plan_entries(
    project: Project,
    config: ReleaseConfig,
    console: ConsoleProtocol,
) -> list[StagedEntry]:
    """Resolve includes minus exclusions into the archive manifest."""
    planned: list[StagedEntry] = []
    for entry in resolve_includes(project, config):
        rel = _normalize(entry)
        if rel is None:
            console.warning(f'"{entry}" is outside the plugin root, skipping.')
            continue

        name = PurePosixPath(rel).name
        if _is_tool_artifact(name, config.plugin_slug):
            continue
        if is_excluded(name, config.excluded_files):
            console.print(f'"{rel}" is excluded.')
            continue

        source = project.path(rel)
        if not source.exists():
            console.warning(f'"{rel}" not found, skipping.')
            continue

        planned.append(StagedEntry(source=source, dest=rel))
    return planned


def _mirror_dir(
    source: Path,
    target: Path,
    excludes: Sequence[str],
    *,
    cwd: Path,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> None:
    """Copy a directory tree, pruning excluded names at any depth.

    Raises:
        OSError / shutil.Error: when the fallback copy fails.
    """
    if runner.available("rsync"):
        cmd = ["rsync", "-a", *(f"--exclude={p}" for p in excludes), f"{source}/", f"{target}/"]
        console.command(cmd)
        match runner.run(cmd, cwd=cwd):
            case Ok(_):
                return
            case Err(e):
                console.warning(f"rsync copy failed ({e}), trying normal copy...")

    # target may already hold files from an earlier include entry or a partial rsync.
    shutil.copytree(
        source,
        target,
        symlinks=True,
        ignore=shutil.ignore_patterns(*excludes),
        dirs_exist_ok=True,
    )


def _clear_scratch_dirs(root: Path, console: ConsoleProtocol) -> None:
    """Remove every `.temp-release-*` directory left in `root` by earlier runs."""
    for stale in sorted(root.glob(f"{SCRATCH_PREFIX}*")):
        if not stale.is_dir() or stale.is_symlink():
            continue
        try:
            shutil.rmtree(stale, onexc=_remove_readonly)
        except OSError as e:
            console.warning(f"Could not remove temporary folder {stale}: {e}")
        else:
            console.print(f"Stale temporary folder removed: {stale.name}")


def _zip_dir(source_dir: Path, zip_path: Path) -> int:
    """Zip the contents of `source_dir` (members relative to it). Returns the file count."""
    count = 0
    # Source files may carry pre-1980 mtimes, which ZIP cannot represent.
    with ZipFile(zip_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
        for dirpath, dirnames, filenames in os.walk(source_dir):
            dirnames.sort()
            base = Path(dirpath)
            for d in dirnames:
                zf.write(base / d, arcname=(base / d).relative_to(source_dir).as_posix())
            for f in sorted(filenames):
                zf.write(base / f, arcname=(base / f).relative_to(source_dir).as_posix())
                count += 1
    return count


def _stage(
    entries: Sequence[StagedEntry],
    scratch: Path,
    config: ReleaseConfig,
    *,
    cwd: Path,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> None:
    vendor_listed = any(e.dest == VENDOR_DIR for e in entries)
    if vendor_listed and not (cwd / VENDOR_DIR / VENDOR_LOADER).exists():
        console.warning(
            f"{VENDOR_DIR}/{VENDOR_LOADER} not found! Composer packages may not be installed."
        )

    console.info("Copying files to temporary folder...")
    for entry in entries:
        target = scratch / entry.dest
        target.parent.mkdir(parents=True, exist_ok=True)

        if entry.source.is_dir():
            _mirror_dir(
                entry.source,
                target,
                config.excluded_files,
                cwd=cwd,
                runner=runner,
                console=console,
            )
            if entry.dest == VENDOR_DIR:
                if (target / VENDOR_LOADER).exists():
                    console.success(f"{VENDOR_DIR}/{VENDOR_LOADER} successfully copied.")
                else:
                    console.warning(
                        f"{VENDOR_DIR}/{VENDOR_LOADER} could not be copied to temporary folder!"
                    )
        else:
            shutil.copy2(entry.source, target)

        console.print(f'"{entry.dest}" copied.')


def build_archive(
    project: Project,
    config: ReleaseConfig,
    version: str,
    *,
    runner: CommandRunner,
    console: ConsoleProtocol,
) -> Result[Path, ArchiveError]:
    """Stage the plugin and compress it into `<slug>.zip`.

    Returns:
        Ok(absolute archive path) or Err(ArchiveError). The scratch directory
        never survives this call.
    """
    zip_path = project.archive_path(config.plugin_slug)
    scratch = project.scratch_dir(version)

    entries = plan_entries(project, config, console)

    if zip_path.exists():
        try:
            zip_path.unlink()
            console.print(f"Old zip file deleted: {zip_path.name}")
        except OSError as e:
            console.warning(f"Error deleting old zip file: {e}")

    try:
        _clear_scratch_dirs(project.root, console)
        scratch.mkdir(parents=True)
        console.print(f"Temporary folder created: {scratch.name}")

        _stage(entries, scratch, config, cwd=project.root, runner=runner, console=console)

        console.info("Creating ZIP file...")
        try:
            count = _zip_dir(scratch, zip_path)
        except BaseException:
            zip_path.unlink(missing_ok=True)
            raise
    except OSError as e:
        return Err(ArchiveError(f"ZIP file creation error: {e}", path=zip_path))
    finally:
        if scratch.exists():
            try:
                shutil.rmtree(scratch, onexc=_remove_readonly)
            except OSError as e:
                console.warning(f"Could not remove temporary folder {scratch}: {e}")
            else:
                console.print("Temporary folder cleaned.")

    console.success(f"ZIP file created: {zip_path.name} ({count} files)")
    return Ok(zip_path)
