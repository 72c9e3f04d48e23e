from __future__ import annotations

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate
from checkup.services.formatting import format_bytes
from checkup.services.units import disk_percent


def smart_finding(status: str | None) -> Finding | None:
    if not status:
        return None
    if status.lower() == "verified":
        return Finding("SSD Health", Severity.GOOD, "SSD health: Verified, drive is healthy")
    return Finding(
        "SSD Health",
        Severity.CRITICAL,
        f"SSD health: {status}",
        recommendation=f"SSD health is '{status}'. Back up your data immediately and consider drive replacement.",
    )


def check_storage(sensors: Sensors) -> Section:
    section = Section("Storage Analysis")
    section.heading("Disk Space")
    total = sensors.get_int(SensorName.DISK_TOTAL)
    used = sensors.get_int(SensorName.DISK_USED)
    available = sensors.get_int(SensorName.DISK_AVAILABLE)
    pct = disk_percent(used, total)
    if pct is None:
        section.note("Disk usage: could not determine")
    else:
        free = format_bytes(available if available is not None else max(0, (total or 0) - (used or 0)))
        section.add(
            evaluate(
                Metric.DISK_USAGE,
                pct,
                "Disk Space",
                "Disk: {used} used of {total} ({available} free, {value}% full)",
                used=format_bytes(used or 0),
                total=format_bytes(total or 0),
                available=free,
            )
        )

    section.heading("Disk Health (SSD)")
    smart = smart_finding(sensors.get_text(SensorName.DISK_SMART_STATUS))
    if smart is None:
        section.note("SSD health: could not determine (some Macs don't expose SMART data)")
    section.add(smart)
    return section
