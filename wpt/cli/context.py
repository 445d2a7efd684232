from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from wpt.core.project import Project, detect_project
from wpt.output.console import ConsoleProtocol, RichConsole
from wpt.output.prompt import PromptProtocol, TyperPrompt
from wpt.platform.process import CommandRunner, SubprocessRunner
from wpt.services.credentials import CredentialProvider, JsonCredentialStore, load_env
from wpt.services.upload import FtpTransport, Transport


@dataclass(frozen=True, slots=True)
class CLIContext:
    project: Project
    console: ConsoleProtocol
    prompt: PromptProtocol
    runner: CommandRunner
    store: CredentialProvider
    transport: Transport
    env: Mapping[str, str]


def project_key(project: Project) -> str:
    """Credential store key: the resolved project directory.

    Independent of wp-tools.json, so credentials saved before `init` stay
    visible after it.
    """
    return str(project.root.resolve())


def build_context() -> CLIContext:
    project = detect_project()
    console = RichConsole()
    return CLIContext(
        project=project,
        console=console,
        prompt=TyperPrompt(),
        runner=SubprocessRunner(),
        store=JsonCredentialStore(project_key(project)),
        transport=FtpTransport(),
        env=load_env(project.env_file, console=console),
    )
