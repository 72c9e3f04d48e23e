from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"

    @property
    def glyph(self) -> str:
        return _SEVERITY_GLYPH[self]


_SEVERITY_GLYPH: dict[Severity, str] = {
    Severity.GOOD: "✓",
    Severity.WARNING: "⚠",
    Severity.CRITICAL: "✗",
}


class Metric(str, Enum):
    BATTERY_HEALTH = "battery_health"
    CYCLE_USAGE = "cycle_usage"
    BATTERY_TEMPERATURE = "battery_temperature"
    CELL_BALANCE = "cell_balance"
    DISK_USAGE = "disk_usage"
    MEMORY_FREE = "memory_free"
    SWAP_USED = "swap_used"
    WIFI_SIGNAL = "wifi_signal"
    NETWORK_LATENCY = "network_latency"
    BACKUP_AGE = "backup_age"
    UPTIME = "uptime"
    PROCESS_CPU = "process_cpu"
    PROCESS_MEMORY = "process_memory"


# Closed set of cleanup behaviours a reclaimable category can be bound to.
class ActionKind(str, Enum):
    CLEAR_CONTENTS = "clear-contents"
    DELETE_AGED = "delete-aged"
    EMPTY_TRASH = "empty-trash"
    DELEGATE_TO_TOOL = "delegate-to-tool"
    REMOVE_TREE = "remove-tree"
    CONFIRM_THEN_REMOVE = "confirm-then-remove"
    SYSTEM_DELEGATE = "system-delegate"


class ProbeKind(str, Enum):
    DIRECTORY = "directory"
    AGED_FILES = "aged_files"
    TOOL_CACHE = "tool_cache"
    SNAPSHOTS = "snapshots"
    LOCALES = "locales"
    SIDECARS = "sidecars"


class ActionStatus(str, Enum):
    DONE = "done"
    MISSING = "missing"
    FAILED = "failed"
    DECLINED = "declined"


class StartupKind(str, Enum):
    LOGIN_ITEM = "login"
    LAUNCH_AGENT = "agent"

    @property
    def label(self) -> str:
        return "Login Item" if self is StartupKind.LOGIN_ITEM else "Background"
