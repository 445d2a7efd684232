"""Tests for wpt.git.repository."""

from __future__ import annotations

from pathlib import Path

from wpt.core.result import Err, Ok
from wpt.git.repository import Repository, commit_message
from wpt.platform.process import RecordingRunner


def test_commit_message() -> None:
    assert commit_message("1.2.4") == "version bump to 1.2.4"


def test_commit_files_adds_then_commits_only_those_paths(tmp_path: Path) -> None:
    runner = RecordingRunner()
    repo = Repository(tmp_path, runner)

    result = repo.commit_files(["package.json", "demo.php"], "version bump to 1.2.4")

    assert result == Ok(None)
    assert runner.commands == [
        "git add -- package.json demo.php",
        "git commit -m 'version bump to 1.2.4' -- package.json demo.php",
    ]
    assert all(cwd == tmp_path for _, cwd in runner.calls)


def test_add_failure_skips_commit(tmp_path: Path) -> None:
    runner = RecordingRunner(failures={"git add": 128})

    result = Repository(tmp_path, runner).commit_files(["a"], "msg")

    assert isinstance(result, Err)
    assert result.error.command == "add"
    assert result.error.returncode == 128
    assert len(runner.calls) == 1


def test_commit_failure(tmp_path: Path) -> None:
    runner = RecordingRunner(failures={"git commit": 1})

    result = Repository(tmp_path, runner).commit_files(["a"], "msg")

    assert isinstance(result, Err)
    assert "git commit failed" in result.error.message


def test_add_nothing_is_noop(tmp_path: Path) -> None:
    runner = RecordingRunner()
    assert Repository(tmp_path, runner).add([]) == Ok(None)
    assert runner.calls == []


def test_is_repo_asks_git(tmp_path: Path) -> None:
    runner = RecordingRunner()

    assert Repository(tmp_path, runner).is_repo()
    assert runner.commands == ["git rev-parse --is-inside-work-tree"]
    assert runner.calls[0][1] == tmp_path


def test_is_repo_false_outside_work_tree(tmp_path: Path) -> None:
    runner = RecordingRunner(failures={"git rev-parse": 128})
    assert not Repository(tmp_path, runner).is_repo()


def test_is_repo_does_not_need_local_git_dir(tmp_path: Path) -> None:
    # Plugin in a subdirectory of a larger checkout: no `.git` beside it.
    plugin = tmp_path / "wp-content" / "plugins" / "demo"
    plugin.mkdir(parents=True)
    assert not (plugin / ".git").exists()
    assert Repository(plugin, RecordingRunner()).is_repo()
