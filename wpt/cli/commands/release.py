from __future__ import annotations

import typer

from wpt.cli.commands._helpers import exit_on_error
from wpt.cli.context import build_context
from wpt.core.errors import ErrorCode
from wpt.services.release import ReleaseService


def release(
    release_type: str | None = typer.Argument(None, help="patch, minor or major"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip prompts and confirmation"),
) -> None:
    """Bump the version, build the plugin and package it."""
    ctx = build_context()

    service = ReleaseService(
        project=ctx.project,
        console=ctx.console,
        prompt=ctx.prompt,
        runner=ctx.runner,
        store=ctx.store,
        transport=ctx.transport,
        env=ctx.env,
    )
    exit_on_error(service.run(release_type, assume_yes=yes), ctx, ErrorCode.CONFIG_ERROR)
