"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import typer

from wpt.core.errors import ErrorCode
from wpt.core.result import Err, Result
from wpt.output.console import Style

if TYPE_CHECKING:
    from wpt.cli.context import CLIContext


def exit_on_error[T, E](
    result: Result[T, E],
    ctx: CLIContext,
    error_code: ErrorCode = ErrorCode.CONFIG_ERROR,
) -> None:
    """Exit with `error_code` if result is Err, otherwise return.

    Expects error objects to have 'message' and optional 'hint' attributes.
    An error carrying its own `code` overrides `error_code`.
    """
    if isinstance(result, Err):
        error = result.error
        message: str = getattr(error, "message", str(error))
        hint: str | None = getattr(error, "hint", None)
        code: ErrorCode = getattr(error, "code", error_code)
        ctx.console.error(message)
        if hint:
            ctx.console.print(f"hint: {hint}", Style.DIM)
        exit_with_code(int(code))


def exit_with_code(code: int) -> NoReturn:
    raise typer.Exit(code=code)
