from __future__ import annotations

import typer

from wpt.cli.commands._helpers import exit_on_error
from wpt.cli.context import build_context
from wpt.core.config import load_config
from wpt.core.errors import ErrorCode
from wpt.output.console import Style


def init(
    force: bool = typer.Option(False, "--force", help="Recreate wp-tools.json from scratch"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Never prompt"),
) -> None:
    """Create wp-tools.json for the plugin in the current directory."""
    ctx = build_context()
    path = ctx.project.settings_path

    if path.exists() and not force:
        ctx.console.info(f"Configuration file already exists: {path}")
        ctx.console.print("Use --force to recreate it.", Style.DIM)
        return

    result = load_config(
        ctx.project,
        skip_prompts=yes,
        prompt=ctx.prompt,
        console=ctx.console,
        fresh=force,
    )
    exit_on_error(result, ctx, ErrorCode.CONFIG_ERROR)
