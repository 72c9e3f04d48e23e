from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from checkup.models.enums import ActionKind, ActionStatus, ProbeKind


@dataclass(slots=True)
class CategorySpec:
    """Static description of a cleanup category: where to look and what to do."""

    key: str
    name: str
    description: str
    action: ActionKind
    probe: ProbeKind = ProbeKind.DIRECTORY
    paths: tuple[str, ...] = ()
    age_days: int | None = None
    command: tuple[str, ...] = ()
    locate_command: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "key": self.key,
            "name": self.name,
            "description": self.description,
            "action": self.action.value,
            "probe": self.probe.value,
            "paths": list(self.paths),
        }
        if self.age_days is not None:
            payload["ageDays"] = self.age_days
        if self.command:
            payload["command"] = list(self.command)
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CategorySpec:
        age_raw = payload.get("ageDays")
        return cls(
            key=str(payload.get("key") or str(payload["name"]).lower().replace(" ", "_")),
            name=str(payload["name"]),
            description=str(payload.get("description", "User-defined cleanup location.")),
            action=ActionKind(str(payload.get("action", ActionKind.CLEAR_CONTENTS.value))),
            probe=ProbeKind(str(payload.get("probe", ProbeKind.DIRECTORY.value))),
            paths=tuple(str(p) for p in payload.get("paths", [])),
            age_days=int(age_raw) if age_raw is not None else None,
            command=tuple(str(part) for part in payload.get("command", [])),
        )


@dataclass(slots=True)
class Category:
    """A category as found by the most recent scan. Sizes are point-in-time estimates."""

    key: str
    name: str
    description: str
    action: ActionKind
    paths: list[str]
    size_bytes: int = 0
    item_count: int = 0
    targets: list[str] = field(default_factory=list)
    age_days: int | None = None
    command: tuple[str, ...] = ()

    def is_listable(self, floor_bytes: int) -> bool:
        if self.action is ActionKind.SYSTEM_DELEGATE:
            return self.item_count > 0
        return self.size_bytes >= floor_bytes


@dataclass(slots=True, frozen=True)
class ExecutionPlan:
    categories: tuple[Category, ...]
    dropped: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.categories


@dataclass(slots=True, frozen=True)
class ActionResult:
    category_key: str
    name: str
    status: ActionStatus
    bytes_freed: int = 0
    message: str = ""

    @property
    def success(self) -> bool:
        return self.status is ActionStatus.DONE
