"""Filesystem helpers."""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path

__all__ = ["atomic_write_json", "atomic_write_text"]


def _default_mode() -> int:
    # os.umask has no read-only form: set and restore.
    mask = os.umask(0)
    os.umask(mask)
    return 0o666 & ~mask


def atomic_write_text(
    path: Path, content: str, *, encoding: str = "utf-8", mode: int | None = None
) -> None:
    """Replace `path` with `content` in one rename.

    Readers see either the old file or the new one, never a partial write.

    The replacement keeps the permission bits of the file it replaces, so a
    0644 plugin file stays 0644 (and is packed that way). A new file gets
    the usual umask-derived mode rather than the private 0600 of a temp file.
    An explicit `mode` overrides both and is applied before the rename.

    `content` is written as-is: no newline translation, so CRLF files stay
    CRLF when the caller read them with `newline=""`.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if mode is not None:
            os.chmod(tmp_path, mode)
        elif path.exists():
            shutil.copymode(path, tmp_path)
        else:
            os.chmod(tmp_path, _default_mode())
        os.replace(tmp_path, path)
    finally:
        tmp_path.unlink(missing_ok=True)


def atomic_write_json(path: Path, data: object, *, mode: int | None = None) -> None:
    """Write JSON with 2-space indent and a trailing newline (npm style)."""
    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n", mode=mode)
