"""Tests for command line routing in wpt.cli.app."""

from __future__ import annotations

import pytest

from wpt.cli.app import main, route
from wpt.core.errors import ErrorCode


class TestRoute:
    @pytest.mark.parametrize("argv", [[], ["help"], ["-h"], ["--help"]])
    def test_usage(self, argv: list[str]) -> None:
        assert route(argv) == ["help"]

    def test_bare_release_type(self) -> None:
        assert route(["minor"]) == ["release", "minor"]

    def test_yes_anywhere(self) -> None:
        assert route(["-y", "major"]) == ["release", "major", "--yes"]
        assert route(["release", "--yes", "patch"]) == ["release", "patch", "--yes"]
        assert route(["init", "-y"]) == ["init", "--yes"]

    def test_yes_not_forwarded_to_ftp_verbs(self) -> None:
        assert route(["show-ftp", "--yes"]) == ["show-ftp"]

    def test_release_without_type(self) -> None:
        assert route(["release"]) == ["release"]

    def test_version(self) -> None:
        assert route(["--version"]) == ["--version"]

    def test_unknown_verb(self) -> None:
        assert route(["deploy"]) is None


class TestMain:
    def test_unknown_verb_exits_user_error(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["deploy", "--yes"])

        assert exc.value.code == int(ErrorCode.USER_ERROR)
        out = capsys.readouterr().out
        assert "Unknown command: deploy" in out
        assert "Usage: wp-tools" in out

    def test_no_arguments_shows_usage(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])

        assert exc.value.code == 0
        assert "Usage: wp-tools" in capsys.readouterr().out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        from wpt import __version__

        with pytest.raises(SystemExit) as exc:
            main(["--version"])

        assert exc.value.code == 0
        assert __version__ in capsys.readouterr().out
