"""Release upload over FTP.

The transfer is a single blocking session: connect, make sure the remote
directory exists, store `<slug>.zip`, close. The session is closed on every
path once connect succeeded. Upload is optional, so every failure here is a
warning for the release.

Transport and Session are protocols; FtpTransport is the real
implementation (standard library ftplib, plain FTP) and tests use a stub.
"""

from __future__ import annotations

import ftplib
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from wpt.core.config import DEFAULT_FTP_PORT, ReleaseConfig
from wpt.core.outcome import Outcome
from wpt.core.result import Err, Ok, Result
from wpt.services.credentials import ENV_KEYS, CredentialProvider

if TYPE_CHECKING:
    from wpt.output.console import ConsoleProtocol

__all__ = [
    "FtpSession",
    "FtpSettings",
    "FtpTransport",
    "RecordingSession",
    "RecordingTransport",
    "Session",
    "Transport",
    "UploadError",
    "check_connection",
    "resolve_ftp_settings",
    "upload_enabled",
    "upload_release",
]

DEFAULT_REMOTE_PATH = "/"
FTP_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True, slots=True)
class UploadError:
    """ConnectError / DirError / TransferError."""

    message: str


@dataclass(frozen=True, slots=True)
class FtpSettings:
    """Effective FTP settings after precedence resolution."""

    enabled: bool
    host: str
    user: str
    password: str
    port: int = DEFAULT_FTP_PORT
    path: str = DEFAULT_REMOTE_PATH

    @property
    def missing(self) -> tuple[str, ...]:
        fields = {"host": self.host, "user": self.user, "password": self.password}
        return tuple(k for k, v in fields.items() if not v)


class Session(Protocol):
    def ensure_remote_dir(self, path: str) -> Result[None, UploadError]:
        """Create `path` as needed and make it the working directory."""
        ...

    def upload(self, local_file: Path, remote_name: str) -> Result[None, UploadError]: ...

    def close(self) -> None: ...


class Transport(Protocol):
    def connect(
        self, host: str, user: str, password: str, port: int
    ) -> Result[Session, UploadError]: ...


class FtpSession:
    def __init__(self, ftp: ftplib.FTP) -> None:
        self._ftp = ftp

    def ensure_remote_dir(self, path: str) -> Result[None, UploadError]:
        try:
            if path.startswith("/"):
                self._ftp.cwd("/")
            for part in (p for p in path.split("/") if p):
                try:
                    self._ftp.cwd(part)
                except ftplib.error_perm:
                    self._ftp.mkd(part)
                    self._ftp.cwd(part)
        except ftplib.all_errors as e:
            return Err(UploadError(f"Upload directory error ({path}): {e}"))
        return Ok(None)

    def upload(self, local_file: Path, remote_name: str) -> Result[None, UploadError]:
        try:
            with local_file.open("rb") as fh:
                self._ftp.storbinary(f"STOR {remote_name}", fh)
        except ftplib.all_errors as e:
            return Err(UploadError(f"FTP upload error: {e}"))
        return Ok(None)

    def close(self) -> None:
        try:
            self._ftp.quit()
        except ftplib.all_errors:
            # QUIT failed (server already gone); drop the socket instead.
            self._ftp.close()


class FtpTransport:
    def __init__(self, *, timeout: float = FTP_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def connect(self, host: str, user: str, password: str, port: int) -> Result[Session, UploadError]:
        ftp = ftplib.FTP(timeout=self._timeout)
        try:
            ftp.connect(host, port)
            ftp.login(user, password)
        except ftplib.all_errors as e:
            ftp.close()
            return Err(UploadError(f"FTP connection error: {e}"))
        return Ok(FtpSession(ftp))


def _store_str(store: CredentialProvider, key: str) -> str | None:
    value = store.get(key)
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _as_port(value: str | int | None) -> int | None:
    if isinstance(value, int):
        return value
    if value and value.strip().isdigit():
        return int(value.strip())
    return None


def upload_enabled(config: ReleaseConfig, store: CredentialProvider) -> bool:
    """Upload runs when wp-tools.json or the credential store enables it."""
    return config.ftp.enabled or store.get("ftp.enabled") is True


def resolve_ftp_settings(
    config: ReleaseConfig,
    store: CredentialProvider,
    env: Mapping[str, str],
) -> FtpSettings:
    """Merge credential sources: store > environment > wp-tools.json."""

    def pick(key: str, from_config: str) -> str:
        stored = _store_str(store, key)
        if stored:
            return stored
        env_value = env.get(ENV_KEYS[key], "").strip()
        if env_value:
            return env_value
        return from_config

    port = (
        _as_port(_store_str(store, "ftp.port"))
        or _as_port(env.get(ENV_KEYS["ftp.port"]))
        or config.ftp.port
        or DEFAULT_FTP_PORT
    )
    password = store.get("ftp.password")
    if not isinstance(password, str) or not password:
        password = env.get(ENV_KEYS["ftp.password"]) or config.ftp.password

    return FtpSettings(
        enabled=upload_enabled(config, store),
        host=pick("ftp.host", config.ftp.host),
        user=pick("ftp.user", config.ftp.user),
        password=password,
        port=port,
        path=pick("ftp.path", config.ftp.path) or DEFAULT_REMOTE_PATH,
    )


def upload_release(
    archive: Path,
    remote_name: str,
    settings: FtpSettings,
    *,
    transport: Transport,
    console: ConsoleProtocol,
) -> Outcome:
    """Upload `archive` as `remote_name` into `settings.path`.

    Skipped (ok, no connection attempted) when upload is disabled.
    """
    if not settings.enabled:
        console.print("FTP upload is disabled. Skipping.")
        return Outcome.skip("upload")

    if not archive.is_file():
        msg = f"ZIP file not found: {archive}"
        console.warning(msg)
        return Outcome.failure("upload", msg)

    if settings.missing:
        msg = (
            f"FTP details are missing ({', '.join(settings.missing)}). "
            'Set them with the "set-ftp" command.'
        )
        console.warning(msg)
        return Outcome.failure("upload", msg)

    console.info(f"Connecting to {settings.host}:{settings.port}...")
    connected = transport.connect(settings.host, settings.user, settings.password, settings.port)
    if isinstance(connected, Err):
        console.warning(connected.error.message)
        return Outcome.failure("upload", connected.error.message)

    session = connected.value
    try:
        console.print(f"Changing to target directory: {settings.path}")
        ready = session.ensure_remote_dir(settings.path)
        if isinstance(ready, Err):
            console.warning(ready.error.message)
            return Outcome.failure("upload", ready.error.message)

        console.info("Uploading ZIP file...")
        sent = session.upload(archive, remote_name)
        if isinstance(sent, Err):
            console.warning(sent.error.message)
            return Outcome.failure("upload", sent.error.message)
    finally:
        session.close()

    console.success("ZIP file uploaded successfully.")
    return Outcome.success("upload")


def check_connection(
    settings: FtpSettings,
    *,
    transport: Transport,
    console: ConsoleProtocol,
) -> Result[None, UploadError]:
    """Connect and verify the upload directory (used by `set-ftp`)."""
    connected = transport.connect(settings.host, settings.user, settings.password, settings.port)
    if isinstance(connected, Err):
        return connected

    session = connected.value
    console.success("FTP connection test successful!")
    try:
        ready = session.ensure_remote_dir(settings.path)
    finally:
        session.close()
    if isinstance(ready, Err):
        return ready
    console.success(f"Upload directory exists and is accessible: {settings.path}")
    return Ok(None)


@dataclass
class RecordingSession:
    """Session stub: records directories and uploads."""

    fail_dir: str | None = None
    fail_upload: str | None = None
    dirs: list[str] = field(default_factory=list[str])
    uploads: list[tuple[Path, str]] = field(default_factory=list[tuple[Path, str]])
    closed: bool = False

    def ensure_remote_dir(self, path: str) -> Result[None, UploadError]:
        self.dirs.append(path)
        if self.fail_dir:
            return Err(UploadError(self.fail_dir))
        return Ok(None)

    def upload(self, local_file: Path, remote_name: str) -> Result[None, UploadError]:
        if self.fail_upload:
            return Err(UploadError(self.fail_upload))
        self.uploads.append((local_file, remote_name))
        return Ok(None)

    def close(self) -> None:
        self.closed = True


@dataclass
class RecordingTransport:
    """Transport stub for tests; `connects` counts connection attempts."""

    fail_connect: str | None = None
    fail_dir: str | None = None
    fail_upload: str | None = None
    connects: list[tuple[str, str, int]] = field(default_factory=list[tuple[str, str, int]])
    sessions: list[RecordingSession] = field(default_factory=list[RecordingSession])

    def connect(self, host: str, user: str, password: str, port: int) -> Result[Session, UploadError]:
        self.connects.append((host, user, port))
        if self.fail_connect:
            return Err(UploadError(self.fail_connect))
        session = RecordingSession(fail_dir=self.fail_dir, fail_upload=self.fail_upload)
        self.sessions.append(session)
        return Ok(session)
