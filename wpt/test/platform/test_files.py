"""Tests for wpt.platform.files."""

from __future__ import annotations

import json
import os
import stat
import sys
from pathlib import Path

import pytest

from wpt.platform.files import atomic_write_json, atomic_write_text


def test_atomic_write_text_creates_parents(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "dir" / "file.txt"
    atomic_write_text(target, "hello\n")

    assert target.read_text(encoding="utf-8") == "hello\n"
    assert [p.name for p in target.parent.iterdir()] == ["file.txt"]


def test_atomic_write_text_replaces(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("old", encoding="utf-8")
    atomic_write_text(target, "new")
    assert target.read_text(encoding="utf-8") == "new"


def test_atomic_write_json_format(tmp_path: Path) -> None:
    target = tmp_path / "package.json"
    atomic_write_json(target, {"name": "demo", "description": "Café"})

    text = target.read_text(encoding="utf-8")
    assert text.endswith("}\n")
    assert '  "name": "demo"' in text
    assert "Café" in text
    assert json.loads(text) == {"name": "demo", "description": "Café"}


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
@pytest.mark.parametrize("mode", [0o644, 0o640, 0o755])
def test_atomic_write_text_keeps_existing_mode(tmp_path: Path, mode: int) -> None:
    target = tmp_path / "demo.php"
    target.write_text("old", encoding="utf-8")
    target.chmod(mode)

    atomic_write_text(target, "new")

    assert stat.S_IMODE(target.stat().st_mode) == mode


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_atomic_write_text_new_file_follows_umask(tmp_path: Path) -> None:
    old_mask = os.umask(0o022)
    try:
        atomic_write_text(tmp_path / "new.txt", "x")
    finally:
        os.umask(old_mask)

    assert stat.S_IMODE((tmp_path / "new.txt").stat().st_mode) == 0o644


def test_atomic_write_text_keeps_crlf(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    atomic_write_text(target, "a\r\nb\r\n")
    assert target.read_bytes() == b"a\r\nb\r\n"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX permission bits")
def test_atomic_write_json_explicit_mode_wins(tmp_path: Path) -> None:
    target = tmp_path / "credentials.json"
    target.write_text("{}", encoding="utf-8")
    target.chmod(0o644)

    atomic_write_json(target, {"projects": {}}, mode=0o600)

    assert stat.S_IMODE(target.stat().st_mode) == 0o600
