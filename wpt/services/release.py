"""Release pipeline.

Runs the release steps in order:

1. load settings (creating wp-tools.json when needed)
2. read the current version and compute the next one
3. confirm (unless --yes)
4. write the version and commit it
5. package installs and the frontend build
6. build `<slug>.zip`
7. upload (when enabled)
8. summary

Steps 4, 5 and 7 are best effort and only add warnings to the report.
Settings, version parsing and the archive are fatal: the run stops and no
later step is attempted.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from wpt.core.config import ConfigError, ReleaseConfig, load_config
from wpt.core.errors import ErrorCode
from wpt.core.outcome import ReleaseReport
from wpt.core.project import Project
from wpt.core.result import Err, Ok, Result
from wpt.core.version import ReleaseType, Version, next_version, parse_version
from wpt.git.repository import Repository
from wpt.output.console import ConsoleProtocol, Style
from wpt.output.prompt import PromptProtocol
from wpt.platform.process import CommandRunner
from wpt.services.archive import build_archive
from wpt.services.credentials import CredentialProvider
from wpt.services.dependencies import build_frontend, install_composer, install_packages
from wpt.services.upload import Transport, resolve_ftp_settings, upload_release
from wpt.services.versioning import apply_version, read_current_version

__all__ = ["ReleaseError", "ReleaseService"]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """A fatal release failure and the exit code it maps to."""

    message: str
    code: ErrorCode = ErrorCode.CONFIG_ERROR
    hint: str | None = None

    @classmethod
    def from_config(cls, error: ConfigError) -> ReleaseError:
        return cls(message=error.message, code=ErrorCode.CONFIG_ERROR, hint=error.hint)


class ReleaseService:
    """Release orchestration for one plugin project.

    Every side effect goes through an injected seam (runner, store,
    transport, prompt, console) so the whole pipeline runs in tests against
    a temporary directory.
    """

    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        prompt: PromptProtocol,
        runner: CommandRunner,
        store: CredentialProvider,
        transport: Transport,
        env: Mapping[str, str],
    ) -> None:
        self._project = project
        self._console = console
        self._prompt = prompt
        self._runner = runner
        self._store = store
        self._transport = transport
        self._env = env

    def run(
        self,
        release_type: str | None = None,
        *,
        assume_yes: bool = False,
    ) -> Result[ReleaseReport | None, ReleaseError]:
        """Run a release.

        Returns:
            Ok(report) when the archive was produced (warnings possible),
            Ok(None) when the operator declined the confirmation,
            Err(ReleaseError) on a fatal failure.
        """
        console = self._console
        console.header("WordPress Plugin Release Tool")

        loaded = load_config(
            self._project,
            skip_prompts=assume_yes,
            prompt=None if assume_yes else self._prompt,
            console=console,
        )
        if isinstance(loaded, Err):
            return Err(ReleaseError.from_config(loaded.error))
        config = loaded.value

        current_text = read_current_version(self._project, config)
        parsed = parse_version(current_text)
        if isinstance(parsed, Err):
            return Err(
                ReleaseError(
                    parsed.error.message,
                    code=ErrorCode.CONFIG_ERROR,
                    hint="Fix the version in package.json or the plugin header",
                )
            )
        current = parsed.value

        kind = self._release_type(release_type, assume_yes=assume_yes)
        new_version = next_version(current, kind)

        console.print(f"Plugin: {config.plugin_name}", Style.BOLD)
        console.print(f"Current version: {current}")
        console.print(f"New version: {new_version} ({kind.value})")

        if not assume_yes and not self._prompt.confirm("Do you want to continue?", default=True):
            console.warning("Operation cancelled.")
            return Ok(None)

        report = ReleaseReport(
            plugin_name=config.plugin_name,
            previous_version=str(current),
            version=str(new_version),
        )
        self._prepare(config, new_version, report)

        archived = build_archive(
            self._project,
            config,
            str(new_version),
            runner=self._runner,
            console=console,
        )
        if isinstance(archived, Err):
            return Err(ReleaseError(archived.error.message, code=ErrorCode.ARCHIVE_ERROR))
        report.archive = archived.value

        settings = resolve_ftp_settings(config, self._store, self._env)
        report.add(
            upload_release(
                archived.value,
                archived.value.name,
                settings,
                transport=self._transport,
                console=console,
            )
        )

        self._summary(report)
        return Ok(report)

    def _release_type(self, requested: str | None, *, assume_yes: bool) -> ReleaseType:
        if requested is None:
            if assume_yes:
                return ReleaseType.patch
            requested = self._prompt.ask(
                "Release type (patch, minor, major)", ReleaseType.patch.value
            )

        word = requested.strip().lower()
        if word in {t.value for t in ReleaseType}:
            return ReleaseType(word)
        self._console.warning(f'Unknown release type "{requested}", using patch.')
        return ReleaseType.patch

    def _prepare(self, config: ReleaseConfig, version: Version, report: ReleaseReport) -> None:
        console = self._console
        runner = self._runner

        console.info("Updating version numbers...")
        report.add(
            apply_version(
                self._project,
                config,
                str(version),
                repo=Repository(self._project.root, runner),
                console=console,
            )
        )
        report.add(install_packages(self._project, config, runner=runner, console=console))
        report.add(install_composer(self._project, runner=runner, console=console))
        report.add(build_frontend(self._project, config, runner=runner, console=console))

    def _summary(self, report: ReleaseReport) -> None:
        console = self._console
        console.header("RELEASE PROCESS COMPLETED")
        console.print(f"Plugin: {report.plugin_name}")
        console.print(f"Version: {report.previous_version} -> {report.version}")
        if report.archive is not None:
            console.print(f"ZIP file: {report.archive}")

        upload = report.outcome("upload")
        if upload is not None and not upload.skipped:
            console.print(f"FTP upload: {'done' if upload.ok else 'failed'}")

        if report.clean:
            console.success("Release finished without warnings.")
        else:
            console.warning(f"Release finished with {len(report.warnings)} warning(s).")
