"""Best-effort step outcomes.

Most release steps never stop the run: a failed `npm install` or git commit
is reported and the release carries on to produce the archive. Those steps
return an Outcome instead of a Result, so "continue regardless" is part of
the type rather than a scattering of try/except blocks.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path

__all__ = ["Outcome", "ReleaseReport"]


@dataclass(frozen=True, slots=True)
class Outcome:
    """Result of one best-effort step.

    Attributes:
        step: Short step name ("version", "install", "build", "upload", ...)
        ok: False when the step failed; the run still continues
        skipped: True when the step had nothing to do
        warnings: Human-readable warnings collected during the step
        changed: Paths (relative to the project root) the step modified
    """

    step: str
    ok: bool = True
    skipped: bool = False
    warnings: tuple[str, ...] = ()
    changed: tuple[str, ...] = ()

    @classmethod
    def success(cls, step: str, *, changed: tuple[str, ...] = ()) -> Outcome:
        return cls(step=step, changed=changed)

    @classmethod
    def failure(cls, step: str, warning: str) -> Outcome:
        return cls(step=step, ok=False, warnings=(warning,))

    @classmethod
    def skip(cls, step: str, reason: str | None = None) -> Outcome:
        return cls(step=step, skipped=True, warnings=(reason,) if reason else ())

    def with_warning(self, warning: str, *, failed: bool = False) -> Outcome:
        return replace(
            self,
            ok=self.ok and not failed,
            warnings=(*self.warnings, warning),
        )


def _empty_outcomes() -> list[Outcome]:
    return []


@dataclass
class ReleaseReport:
    """Summary of a release run."""

    plugin_name: str
    previous_version: str
    version: str
    archive: Path | None = None
    outcomes: list[Outcome] = field(default_factory=_empty_outcomes)

    def add(self, outcome: Outcome) -> Outcome:
        self.outcomes.append(outcome)
        return outcome

    def outcome(self, step: str) -> Outcome | None:
        for o in self.outcomes:
            if o.step == step:
                return o
        return None

    @property
    def warnings(self) -> list[str]:
        return [w for o in self.outcomes for w in o.warnings]

    @property
    def clean(self) -> bool:
        """True when every step succeeded."""
        return all(o.ok for o in self.outcomes)
