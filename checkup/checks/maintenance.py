from __future__ import annotations

from checkup.checks.load import process_rows
from checkup.models.enums import Metric, Severity
from checkup.models.finding import Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate
from checkup.services.units import SECONDS_PER_DAY

_SPOTLIGHT_PROCESSES = ("mdworker", "mds_stores")


def check_maintenance(sensors: Sensors) -> Section:
    section = Section("Speed & Optimization Tips")

    rows = process_rows(sensors) or []
    spotlight = sum(r.cpu_pct for r in rows if any(p in r.name.lower() for p in _SPOTLIGHT_PROCESSES))
    if spotlight > 20:
        section.note(f"Spotlight is actively indexing and using {spotlight:.0f}% CPU", Severity.WARNING)
        section.note("If it persists, exclude large folders in System Settings → Spotlight")

    uptime = sensors.get_int(SensorName.SYSTEM_UPTIME_SECONDS)
    if uptime is None:
        section.note("Uptime: could not determine")
    else:
        days = uptime // SECONDS_PER_DAY
        if 7 < days <= 14:
            section.note(f"Uptime: {days} days, a restart every couple of weeks helps")
        else:
            section.add(evaluate(Metric.UPTIME, days, "Uptime", "Uptime: {value} days ({label})"))

    motion = sensors.get_bool(SensorName.REDUCE_MOTION)
    transparency = sensors.get_bool(SensorName.REDUCE_TRANSPARENCY)
    if not motion or not transparency:
        section.heading("Reduce visual effects for a snappier feel")
        section.note("System Settings → Accessibility → Display")
        if not motion:
            section.note("Turn on 'Reduce motion'")
        if not transparency:
            section.note("Turn on 'Reduce transparency'")
    return section
