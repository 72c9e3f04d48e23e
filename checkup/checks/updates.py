from __future__ import annotations

from checkup.models.enums import Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors

STATS_URL = "https://github.com/exelban/stats"


def check_updates(sensors: Sensors) -> Section:
    section = Section("Updates")
    pending = sensors.get_int(SensorName.UPDATES_AVAILABLE)
    if pending is None:
        section.note("Software updates: could not determine")
    elif pending > 0:
        section.add(
            Finding(
                "macOS Updates",
                Severity.WARNING,
                f"{pending} macOS update(s) available",
                float(pending),
                "Install pending macOS updates in System Settings → General → Software Update.",
            )
        )
    else:
        section.add(Finding("macOS Updates", Severity.GOOD, "macOS is up to date"))

    if sensors.get_bool(SensorName.STATS_APP_INSTALLED):
        section.note("Stats menu-bar monitor: installed", Severity.GOOD)
    else:
        section.note("Stats is a free, open-source menu-bar monitor for battery, CPU and RAM")
        section.note(STATS_URL)
    return section
