"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    RichConsole,
    Style,
)
from .prompt import PromptProtocol, ScriptedPrompt, TyperPrompt

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "PromptProtocol",
    "RichConsole",
    "ScriptedPrompt",
    "Style",
    "TyperPrompt",
]
