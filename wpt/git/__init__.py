"""Git integration."""

from .repository import GitError, Repository, commit_message

__all__ = ["GitError", "Repository", "commit_message"]
