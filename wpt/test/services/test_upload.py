"""Tests for wpt.services.upload."""

from __future__ import annotations

from pathlib import Path

from wpt.core.config import FtpConfig, ReleaseConfig
from wpt.core.result import Err, Ok
from wpt.output.console import MockConsole
from wpt.services.credentials import MemoryCredentialStore
from wpt.services.upload import (
    FtpSettings,
    RecordingTransport,
    check_connection,
    resolve_ftp_settings,
    upload_enabled,
    upload_release,
)

SETTINGS = FtpSettings(
    enabled=True, host="ftp.example.com", user="deploy", password="secret", port=21, path="/updates"
)


def _archive(tmp_path: Path) -> Path:
    path = tmp_path / "demo.zip"
    path.write_bytes(b"PK")
    return path


class TestResolveFtpSettings:
    def test_precedence_store_env_config(self) -> None:
        config = ReleaseConfig(
            ftp=FtpConfig(enabled=True, host="cfg-host", user="cfg-user", password="cfg-pass", port=2121, path="/cfg")
        )
        store = MemoryCredentialStore({"ftp.host": "store-host"})
        env = {"FTP_HOST": "env-host", "FTP_USER": "env-user", "UPDATE_SERVER_PATH": "/env"}

        s = resolve_ftp_settings(config, store, env)

        assert s.host == "store-host"
        assert s.user == "env-user"
        assert s.password == "cfg-pass"
        assert s.port == 2121
        assert s.path == "/env"
        assert s.enabled

    def test_defaults(self) -> None:
        s = resolve_ftp_settings(ReleaseConfig(), MemoryCredentialStore(), {})
        assert s.port == 21
        assert s.path == "/"
        assert not s.enabled
        assert s.missing == ("host", "user", "password")

    def test_port_from_env(self) -> None:
        s = resolve_ftp_settings(ReleaseConfig(), MemoryCredentialStore(), {"FTP_PORT": "2222"})
        assert s.port == 2222

    def test_config_or_store_enables_upload(self) -> None:
        on = ReleaseConfig(ftp=FtpConfig(enabled=True))
        off = ReleaseConfig()
        assert upload_enabled(on, MemoryCredentialStore())
        assert upload_enabled(on, MemoryCredentialStore({"ftp.enabled": False}))
        assert upload_enabled(off, MemoryCredentialStore({"ftp.enabled": True}))
        assert not upload_enabled(off, MemoryCredentialStore({"ftp.enabled": False}))
        assert not upload_enabled(off, MemoryCredentialStore())


class TestUploadRelease:
    def test_disabled_makes_no_connection(self, tmp_path: Path) -> None:
        transport = RecordingTransport()
        settings = FtpSettings(enabled=False, host="h", user="u", password="p")

        outcome = upload_release(
            _archive(tmp_path), "demo.zip", settings, transport=transport, console=MockConsole()
        )

        assert outcome.ok and outcome.skipped
        assert transport.connects == []

    def test_uploads_into_path(self, tmp_path: Path) -> None:
        transport = RecordingTransport()
        archive = _archive(tmp_path)

        outcome = upload_release(archive, "demo.zip", SETTINGS, transport=transport, console=MockConsole())

        assert outcome.ok and not outcome.skipped
        session = transport.sessions[0]
        assert session.dirs == ["/updates"]
        assert session.uploads == [(archive, "demo.zip")]
        assert session.closed

    def test_missing_credentials_warn(self, tmp_path: Path) -> None:
        transport = RecordingTransport()
        console = MockConsole()
        settings = FtpSettings(enabled=True, host="h", user="", password="")

        outcome = upload_release(_archive(tmp_path), "demo.zip", settings, transport=transport, console=console)

        assert not outcome.ok
        assert transport.connects == []
        assert console.find("user, password")

    def test_missing_archive(self, tmp_path: Path) -> None:
        transport = RecordingTransport()
        outcome = upload_release(
            tmp_path / "nope.zip", "nope.zip", SETTINGS, transport=transport, console=MockConsole()
        )
        assert not outcome.ok
        assert transport.connects == []

    def test_connect_failure_is_warning(self, tmp_path: Path) -> None:
        transport = RecordingTransport(fail_connect="FTP connection error: refused")
        console = MockConsole()

        outcome = upload_release(_archive(tmp_path), "demo.zip", SETTINGS, transport=transport, console=console)

        assert not outcome.ok
        assert console.has_warning()
        assert not console.has_error()

    def test_session_closed_after_transfer_failure(self, tmp_path: Path) -> None:
        transport = RecordingTransport(fail_upload="FTP upload error: 552")

        outcome = upload_release(
            _archive(tmp_path), "demo.zip", SETTINGS, transport=transport, console=MockConsole()
        )

        assert not outcome.ok
        assert outcome.warnings == ("FTP upload error: 552",)
        assert transport.sessions[0].closed

    def test_session_closed_after_dir_failure(self, tmp_path: Path) -> None:
        transport = RecordingTransport(fail_dir="Upload directory error")

        upload_release(_archive(tmp_path), "demo.zip", SETTINGS, transport=transport, console=MockConsole())

        assert transport.sessions[0].closed
        assert transport.sessions[0].uploads == []


class TestCheckConnection:
    def test_success(self) -> None:
        transport = RecordingTransport()
        console = MockConsole()

        assert check_connection(SETTINGS, transport=transport, console=console) == Ok(None)
        assert transport.sessions[0].closed
        assert console.find("FTP connection test successful")

    def test_connect_failure(self) -> None:
        result = check_connection(
            SETTINGS, transport=RecordingTransport(fail_connect="refused"), console=MockConsole()
        )
        assert isinstance(result, Err)
        assert result.error.message == "refused"
