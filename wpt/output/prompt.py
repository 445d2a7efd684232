"""Interactive questions.

Services that need operator input (missing plugin identity, release type,
FTP details) take a PromptProtocol. The CLI passes TyperPrompt; tests pass
ScriptedPrompt with canned answers. When --yes is given no prompt object is
consulted at all.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["PromptProtocol", "ScriptedPrompt", "TyperPrompt"]


class PromptProtocol(Protocol):
    def ask(self, question: str, default: str = "", *, secret: bool = False) -> str:
        """Ask for a value; an empty answer returns `default`."""
        ...

    def confirm(self, question: str, default: bool = True) -> bool: ...


class TyperPrompt:
    def ask(self, question: str, default: str = "", *, secret: bool = False) -> str:
        import typer

        answer: str = typer.prompt(
            question,
            default=default,
            show_default=bool(default) and not secret,
            hide_input=secret,
        )
        return answer.strip() or default

    def confirm(self, question: str, default: bool = True) -> bool:
        import typer

        return typer.confirm(question, default=default)


def _empty_answers() -> deque[str]:
    return deque()


@dataclass
class ScriptedPrompt:
    """Replays answers in order; "" means "accept the default"."""

    answers: deque[str] = field(default_factory=_empty_answers)
    asked: list[str] = field(default_factory=list[str])

    @classmethod
    def of(cls, *answers: str) -> ScriptedPrompt:
        return cls(answers=deque(answers))

    def _next(self, question: str) -> str:
        self.asked.append(question)
        if not self.answers:
            raise AssertionError(f"unexpected prompt: {question}")
        return self.answers.popleft()

    def ask(self, question: str, default: str = "", *, secret: bool = False) -> str:
        return self._next(question).strip() or default

    def confirm(self, question: str, default: bool = True) -> bool:
        answer = self._next(question).strip().lower()
        if not answer:
            return default
        return answer in {"y", "yes"}
