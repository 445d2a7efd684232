"""FTP credential commands (set-ftp, show-ftp, ftp-disable)."""

from __future__ import annotations

from wpt.cli.commands._helpers import exit_on_error, exit_with_code
from wpt.cli.context import CLIContext, build_context
from wpt.core.config import ReleaseConfig, read_settings
from wpt.core.errors import ErrorCode
from wpt.core.result import Err
from wpt.output.console import Style
from wpt.services.credentials import CredentialValue
from wpt.services.upload import FtpSettings, check_connection, resolve_ftp_settings

PASSWORD_MASK = "********"


def _current_config(ctx: CLIContext) -> ReleaseConfig:
    if not ctx.project.settings_path.exists():
        return ReleaseConfig()
    loaded = read_settings(ctx.project)
    if isinstance(loaded, Err):
        ctx.console.warning(f"{loaded.error.message}; ignoring its FTP settings.")
        return ReleaseConfig()
    return loaded.value


def _current_settings(ctx: CLIContext) -> FtpSettings:
    return resolve_ftp_settings(_current_config(ctx), ctx.store, ctx.env)


def set_ftp() -> None:
    """Ask for FTP details, save them and enable the upload."""
    ctx = build_context()
    current = _current_settings(ctx)
    prompt = ctx.prompt

    ctx.console.header("FTP settings")
    host = prompt.ask("FTP host", current.host)
    user = prompt.ask("FTP username", current.user)
    password = prompt.ask("FTP password", current.password, secret=True)
    port_text = prompt.ask("FTP port", str(current.port))
    path = prompt.ask("Upload directory", current.path)

    if not port_text.isdigit():
        ctx.console.error(f"Invalid port: {port_text}")
        exit_with_code(int(ErrorCode.USER_ERROR))

    values: dict[str, CredentialValue] = {
        "ftp.host": host,
        "ftp.user": user,
        "ftp.password": password,
        "ftp.port": int(port_text),
        "ftp.path": path,
        "ftp.enabled": True,
    }
    exit_on_error(ctx.store.update(values), ctx, ErrorCode.IO_ERROR)
    ctx.console.success("FTP settings saved. Upload is enabled.")

    if prompt.confirm("Test the FTP connection now?", default=True):
        settings = _current_settings(ctx)
        result = check_connection(settings, transport=ctx.transport, console=ctx.console)
        if isinstance(result, Err):
            ctx.console.warning(f"FTP connection test failed: {result.error.message}")


def show_ftp() -> None:
    """Show the effective FTP settings (the password is never printed)."""
    ctx = build_context()
    s = _current_settings(ctx)

    ctx.console.header("FTP settings")
    ctx.console.print(f"Upload: {'enabled' if s.enabled else 'disabled'}", Style.BOLD)
    ctx.console.print(f"Host: {s.host or '(not set)'}")
    ctx.console.print(f"User: {s.user or '(not set)'}")
    ctx.console.print(f"Password: {PASSWORD_MASK if s.password else '(not set)'}")
    ctx.console.print(f"Port: {s.port}")
    ctx.console.print(f"Directory: {s.path}")


def ftp_disable() -> None:
    """Turn the FTP upload off for this project."""
    ctx = build_context()
    exit_on_error(ctx.store.set("ftp.enabled", False), ctx, ErrorCode.IO_ERROR)
    if _current_config(ctx).ftp.enabled:
        ctx.console.warning(
            'Stored FTP switch cleared, but "ftpConfig.enabled" is true in wp-tools.json; '
            "upload stays enabled until it is set to false there."
        )
        return
    ctx.console.success("FTP upload disabled.")
