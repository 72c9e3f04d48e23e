from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from checkup.models.enums import StartupKind


@dataclass(slots=True, frozen=True)
class DuplicateGroup:
    size_bytes: int
    checksum: str
    paths: tuple[str, ...]

    @property
    def keep(self) -> str:
        return self.paths[0]

    @property
    def candidates(self) -> tuple[str, ...]:
        return self.paths[1:]

    @property
    def wasted_bytes(self) -> int:
        return self.size_bytes * (len(self.paths) - 1)


@dataclass(slots=True, frozen=True)
class DuplicateReport:
    groups: tuple[DuplicateGroup, ...]
    files_considered: int
    files_hashed: int

    @property
    def wasted_bytes(self) -> int:
        return sum(group.wasted_bytes for group in self.groups)


class DuplicateScanErrorCode(str, Enum):
    NO_ROOTS = "no_roots"
    ABORTED_BY_USER = "aborted_by_user"


@dataclass(slots=True, frozen=True)
class DuplicateScanError:
    code: DuplicateScanErrorCode
    message: str
    candidates: int = 0


@dataclass(slots=True, frozen=True)
class LargeFile:
    path: str
    size_bytes: int
    modified_ts: float


@dataclass(slots=True, frozen=True)
class AppEntry:
    name: str
    path: str
    last_used_ts: float | None


@dataclass(slots=True, frozen=True)
class StaleApp:
    name: str
    path: str
    size_bytes: int
    months_unused: int


@dataclass(slots=True, frozen=True)
class StartupItem:
    name: str
    kind: StartupKind
    detail: str


@dataclass(slots=True, frozen=True)
class RemovalResult:
    """Outcome of one file/app/startup-item operation inside a batch."""

    target: str
    ok: bool
    bytes_affected: int = 0
    message: str = ""
