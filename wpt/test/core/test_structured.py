"""Tests for wpt.core.structured and wpt.core.outcome."""

from __future__ import annotations

from pathlib import Path

from wpt.core.outcome import Outcome, ReleaseReport
from wpt.core.structured import as_str_dict, get_bool, get_int, get_str, get_str_list


class TestStructured:
    def test_as_str_dict(self) -> None:
        assert as_str_dict({"a": 1}) == {"a": 1}
        assert as_str_dict({1: "a"}) is None
        assert as_str_dict([1]) is None

    def test_get_str_strips(self) -> None:
        assert get_str({"k": "  v "}, "k") == "v"
        assert get_str({"k": "   "}, "k") is None
        assert get_str({"k": 3}, "k") is None

    def test_get_int(self) -> None:
        assert get_int({"port": 21}, "port") == 21
        assert get_int({"port": "2121"}, "port") == 2121
        assert get_int({"port": True}, "port") is None
        assert get_int({"port": "ftp"}, "port") is None

    def test_get_bool(self) -> None:
        assert get_bool({"enabled": False}, "enabled") is False
        assert get_bool({"enabled": "yes"}, "enabled") is None

    def test_get_str_list_drops_junk(self) -> None:
        assert get_str_list({"files": ["a.php", 3, " ", " b "]}, "files") == ["a.php", "b"]
        assert get_str_list({"files": "a.php"}, "files") is None


class TestOutcome:
    def test_with_warning_keeps_ok_unless_failed(self) -> None:
        o = Outcome.success("version").with_warning("header not found")
        assert o.ok
        assert o.with_warning("commit failed", failed=True).ok is False

    def test_skip(self) -> None:
        o = Outcome.skip("composer")
        assert o.ok and o.skipped and o.warnings == ()

    def test_report(self) -> None:
        report = ReleaseReport(plugin_name="Demo", previous_version="1.0.0", version="1.0.1")
        report.add(Outcome.success("install"))
        report.add(Outcome.failure("build", "npm run build failed"))
        report.archive = Path("demo.zip")

        assert not report.clean
        assert report.warnings == ["npm run build failed"]
        assert report.outcome("build") is not None
        assert report.outcome("upload") is None
