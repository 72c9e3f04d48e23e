from __future__ import annotations

from typing import TypeAlias

from dataclasses import dataclass, field

from checkup.models.enums import Severity


@dataclass(slots=True, frozen=True)
class Finding:
    subject: str
    severity: Severity
    message: str
    value: float | None = None
    recommendation: str | None = None


# Informational line. Never touches the run counters; `tone` only affects colour.
@dataclass(slots=True, frozen=True)
class Note:
    text: str
    tone: Severity | None = None


@dataclass(slots=True, frozen=True)
class Heading:
    text: str


Entry: TypeAlias = Finding | Note | Heading


@dataclass(slots=True)
class Section:
    title: str
    entries: list[Entry] = field(default_factory=list)

    def heading(self, text: str) -> None:
        self.entries.append(Heading(text))

    def note(self, text: str, tone: Severity | None = None) -> None:
        self.entries.append(Note(text, tone))

    def add(self, finding: Finding | None) -> None:
        if finding is not None:
            self.entries.append(finding)

    @property
    def findings(self) -> list[Finding]:
        return [entry for entry in self.entries if isinstance(entry, Finding)]


@dataclass(slots=True, frozen=True)
class Recommendation:
    text: str
    severity: Severity


@dataclass(slots=True, frozen=True)
class RunSummary:
    problems: int
    warnings: int
    recommendations: tuple[Recommendation, ...]
    reclaimable_bytes: int
    freed_bytes: int

    @property
    def healthy(self) -> bool:
        return self.problems == 0 and self.warnings == 0
