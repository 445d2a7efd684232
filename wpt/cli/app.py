"""wp-tools command line.

`main` normalises the raw command line before handing it to Typer:

- `--yes` / `-y` may appear anywhere and is forwarded to the verbs that
  prompt (init, release)
- a bare `patch`, `minor` or `major` is shorthand for `release <type>`
- no arguments, `help`, `-h` and `--help` show the usage text
- an unknown verb prints the usage text and exits with status 1
"""

from __future__ import annotations

import sys
from collections.abc import Sequence

import typer

from wpt import __version__
from wpt.cli.commands.ftp import ftp_disable, set_ftp, show_ftp
from wpt.cli.commands.init import init
from wpt.cli.commands.release import release
from wpt.core.errors import ErrorCode
from wpt.core.version import ReleaseType
from wpt.output.console import ConsoleProtocol, RichConsole

PROG_NAME = "wp-tools"

USAGE = """\
Usage: wp-tools <command> [options]

Commands:
  init                    Create wp-tools.json for this plugin
  release [type]          Release a new version (type: patch, minor, major)
  patch | minor | major   Shorthand for "release <type>"
  set-ftp                 Save FTP details and enable the upload
  show-ftp                Show the FTP settings (password hidden)
  ftp-disable             Disable the FTP upload
  help                    Show this help

Options:
  -y, --yes               Skip prompts and confirmation
  --version               Show version and exit
"""

YES_FLAGS = frozenset({"--yes", "-y"})
HELP_WORDS = frozenset({"help", "-h", "--help"})
PROMPTING_VERBS = frozenset({"init", "release"})
VERBS = frozenset({"init", "release", "set-ftp", "show-ftp", "ftp-disable", "help"})


app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    rich_markup_mode="rich",
)


def print_usage(console: ConsoleProtocol) -> None:
    for line in USAGE.splitlines():
        console.print(line)


def help_cmd() -> None:
    """Show usage."""
    print_usage(RichConsole())


app.command()(init)
app.command()(release)
app.command("set-ftp")(set_ftp)
app.command("show-ftp")(show_ftp)
app.command("ftp-disable")(ftp_disable)
app.command("help")(help_cmd)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)
    if ctx.invoked_subcommand is None:
        help_cmd()


def route(argv: Sequence[str]) -> list[str] | None:
    """Translate a raw command line into Typer arguments.

    Returns None for an unknown verb.
    """
    assume_yes = any(a in YES_FLAGS for a in argv)
    args = [a for a in argv if a not in YES_FLAGS]

    if not args or args[0] in HELP_WORDS:
        return ["help"]
    if args[0] == "--version":
        return ["--version"]

    if args[0].lower() in {t.value for t in ReleaseType}:
        args = ["release", args[0].lower(), *args[1:]]
    elif args[0] not in VERBS:
        return None

    if assume_yes and args[0] in PROMPTING_VERBS:
        args.append("--yes")
    return args


def main(argv: Sequence[str] | None = None) -> None:
    raw = list(sys.argv[1:] if argv is None else argv)
    args = route(raw)
    if args is None:
        console = RichConsole()
        verb = next(a for a in raw if a not in YES_FLAGS)
        console.error(f"Unknown command: {verb}")
        print_usage(console)
        raise SystemExit(int(ErrorCode.USER_ERROR))

    app(args=args, prog_name=PROG_NAME)
