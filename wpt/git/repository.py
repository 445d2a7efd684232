"""Git operations used by the version bump.

Only staging and committing are needed: after the version files are
rewritten they are added and committed with a fixed message. Commands go
through the injected CommandRunner.

Usage:
    repo = Repository(project.root, runner)
    match repo.commit_files(["package.json", "my-plugin.php"], "version bump to 1.2.4"):
        case Ok(_):
            console.success("Git commit operation successful.")
        case Err(e):
            console.warning(e.message)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from wpt.core.result import Err, Ok, Result
from wpt.platform.process import CommandRunner

__all__ = ["GitError", "Repository", "commit_message"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation (VcsError).

    Attributes:
        command: The git subcommand that failed
        message: Error message
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


def commit_message(version: str) -> str:
    return f"version bump to {version}"


class Repository:
    """Git working tree at `path`.

    Attributes:
        path: Repository root (the plugin root)
    """

    def __init__(self, path: Path, runner: CommandRunner) -> None:
        self.path = path
        self._runner = runner

    def is_repo(self) -> bool:
        """True when `path` is anywhere inside a git work tree.

        Asks git rather than looking for `<path>/.git`, so a plugin kept in a
        subdirectory of a larger repository still counts.
        """
        result = self._runner.run(["git", "rev-parse", "--is-inside-work-tree"], cwd=self.path)
        return isinstance(result, Ok)

    def add(self, paths: Sequence[str]) -> Result[None, GitError]:
        if not paths:
            return Ok(None)
        return self._run("add", ["add", "--", *paths])

    def commit(self, message: str, paths: Sequence[str] = ()) -> Result[None, GitError]:
        """Commit staged changes.

        When `paths` is given only those paths are committed, so unrelated
        staged work stays staged.
        """
        args = ["commit", "-m", message]
        if paths:
            args += ["--", *paths]
        return self._run("commit", args)

    def commit_files(self, paths: Sequence[str], message: str) -> Result[None, GitError]:
        """Stage then commit exactly `paths`."""
        added = self.add(paths)
        if isinstance(added, Err):
            return added
        return self.commit(message, paths)

    def _run(self, command: str, args: list[str]) -> Result[None, GitError]:
        result = self._runner.run(["git", *args], cwd=self.path)
        match result:
            case Ok(_):
                return Ok(None)
            case Err(e):
                return Err(
                    GitError(
                        command=command,
                        message=f"git {command} failed (exit {e.returncode})",
                        returncode=e.returncode,
                    )
                )
