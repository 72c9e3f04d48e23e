from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate, severity_of

_MB = 1024 * 1024

# (process-name fragment, tip).  Matched case-insensitively against the process table.
HEAVY_APPS: tuple[tuple[str, str], ...] = (
    ("Electron", "Many apps use Electron (Chrome under the hood). Consider native alternatives."),
    ("Code Helper", "VS Code / Cursor uses significant RAM. Zed Editor is a lightweight alternative."),
    ("Windsurf", "Windsurf is Electron-based and heavy. Zed Editor is lighter."),
    ("com.docker", "Docker Desktop uses lots of RAM even when idle. OrbStack is a lighter alternative."),
    ("Slack Helper", "Slack's desktop app is an Electron memory hog. Try the web version instead."),
    ("Discord Helper", "Discord desktop is Electron-based. The web version uses less memory."),
    ("Teams", "Microsoft Teams is notoriously heavy. The web version is lighter."),
    ("Spotify Helper", "Spotify desktop is Electron. The web player at open.spotify.com uses less RAM."),
    ("figma_agent", "Figma desktop is Electron. Figma in the browser uses less RAM."),
)


@dataclass(slots=True, frozen=True)
class ProcessRow:
    pid: int
    name: str
    cpu_pct: float
    mem_pct: float
    rss_bytes: int

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> ProcessRow:
        return cls(
            pid=int(payload.get("pid", 0)),
            name=str(payload.get("name") or "?"),
            cpu_pct=float(payload.get("cpu_pct") or 0.0),
            mem_pct=float(payload.get("mem_pct") or 0.0),
            rss_bytes=int(payload.get("rss_bytes") or 0),
        )


def process_rows(sensors: Sensors) -> list[ProcessRow] | None:
    table = sensors.get_list(SensorName.PROCESS_TABLE)
    if table is None:
        return None
    return [ProcessRow.from_mapping(row) for row in table if isinstance(row, Mapping)]


def _top_cpu(section: Section, rows: list[ProcessRow], top_n: int) -> None:
    section.heading("Top CPU Consumers")
    busy = sorted((r for r in rows if r.cpu_pct > 1.0), key=lambda r: r.cpu_pct, reverse=True)[:top_n]
    for row in busy:
        tone = severity_of(Metric.PROCESS_CPU, row.cpu_pct)
        section.note(f"{row.name} is using {row.cpu_pct:.1f}% CPU", None if tone is Severity.GOOD else tone)
    if not any(r.cpu_pct > 10.0 for r in rows):
        section.note("No processes using excessive CPU", Severity.GOOD)


def _top_memory(section: Section, rows: list[ProcessRow], top_n: int) -> None:
    section.heading("Top Memory Consumers")
    hungry = sorted((r for r in rows if r.mem_pct > 1.0), key=lambda r: r.mem_pct, reverse=True)[:top_n]
    for row in hungry:
        tone = severity_of(Metric.PROCESS_MEMORY, row.mem_pct)
        section.note(
            f"{row.name}: {row.mem_pct:.1f}% RAM ({row.rss_bytes // _MB} MB)",
            None if tone is Severity.GOOD else tone,
        )


def _pressure(section: Section, sensors: Sensors) -> None:
    section.heading("Memory Pressure")
    free = sensors.get_int(SensorName.MEMORY_FREE_PERCENT)
    if free is None:
        section.note("Memory pressure: could not determine")
    else:
        section.add(evaluate(Metric.MEMORY_FREE, free, "Memory Pressure", "Memory pressure: {value}% free ({label})"))
    swap = sensors.get_float(SensorName.MEMORY_SWAP_USED_MB)
    if swap is None:
        return
    if swap <= 0:
        section.note("Swap: not in use, RAM is sufficient", Severity.GOOD)
        return
    section.add(evaluate(Metric.SWAP_USED, int(swap), "Swap", "Swap used: {value} MB ({label})"))


def _heavy_apps(section: Section, rows: list[ProcessRow]) -> None:
    section.heading("Known Heavy Apps")
    found = False
    for fragment, tip in HEAVY_APPS:
        needle = fragment.lower()
        matches = [r for r in rows if needle in r.name.lower()]
        if not matches:
            continue
        found = True
        total_mb = sum(r.rss_bytes for r in matches) // _MB
        section.note(f"{fragment} detected, using ~{total_mb} MB RAM", Severity.WARNING)
        section.note(tip)
    if not found:
        section.note("No known resource-heavy apps detected", Severity.GOOD)


def check_load(sensors: Sensors, top_n: int = 8) -> Section:
    section = Section("Resource Hogs")
    rows = process_rows(sensors)
    if rows is None:
        section.note("Process list: could not determine")
    else:
        _top_cpu(section, rows, top_n)
        _top_memory(section, rows, top_n)
    _pressure(section, sensors)
    if rows is not None:
        _heavy_apps(section, rows)
    return section
