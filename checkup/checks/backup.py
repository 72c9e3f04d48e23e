from __future__ import annotations

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate
from checkup.services.units import days_between


def check_backup(sensors: Sensors, now: float) -> Section:
    section = Section("Backup Status")
    destination = sensors.get_text(SensorName.BACKUP_DESTINATION)
    if destination is None:
        section.note("Time Machine: could not determine")
    elif not destination:
        section.add(
            Finding(
                "Time Machine",
                Severity.CRITICAL,
                "Time Machine: NOT CONFIGURED",
                recommendation="No backup configured! Set up Time Machine to protect your data.",
            )
        )
        section.note("If your drive fails, your data is gone. Set up in System Settings → General → Time Machine")
    else:
        section.add(Finding("Time Machine", Severity.GOOD, "Time Machine: Configured"))
        section.note(f"Backup destination: {destination}")
        last = sensors.get_float(SensorName.BACKUP_LAST_SUCCESS)
        if last is None:
            section.note("Last backup: could not determine")
        else:
            days = days_between(last, now)
            section.add(
                evaluate(
                    Metric.BACKUP_AGE,
                    days,
                    "Last Backup",
                    "Last backup: {when}",
                    when="Today" if days <= 1 else f"{days} days ago",
                )
            )

    if sensors.get_bool(SensorName.BACKUP_ICLOUD_DRIVE):
        section.add(Finding("iCloud Drive", Severity.GOOD, "iCloud Drive: Active"))
    else:
        section.note("iCloud Drive: Not detected")
    return section
