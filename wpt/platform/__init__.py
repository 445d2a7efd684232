"""Platform helpers: subprocesses, files, user directories."""

from .files import atomic_write_json, atomic_write_text
from .paths import user_config_dir
from .process import CommandRunner, ProcessError, SubprocessRunner, run, run_silent

__all__ = [
    "CommandRunner",
    "ProcessError",
    "SubprocessRunner",
    "atomic_write_json",
    "atomic_write_text",
    "run",
    "run_silent",
    "user_config_dir",
]
