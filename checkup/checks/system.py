from __future__ import annotations

from datetime import datetime

from checkup.models.finding import Section
from checkup.sensors.base import SensorName, Sensors

_GB = 1024**3


def machine_line(sensors: Sensors) -> str:
    model = sensors.get_text(SensorName.SYSTEM_MODEL) or "Mac"
    chip = sensors.get_text(SensorName.SYSTEM_CHIP)
    arch = sensors.get_text(SensorName.SYSTEM_ARCH)
    family = "Apple Silicon" if arch == "arm64" else "Intel" if arch else None
    detail = ", ".join(part for part in (family, chip) if part)
    return f"{model} ({detail})" if detail else model


def check_system(sensors: Sensors, now: datetime) -> Section:
    section = Section("Mac Health Checkup")
    section.note(f"Machine: {machine_line(sensors)}")
    version = sensors.get_text(SensorName.SYSTEM_OS_VERSION)
    section.note(f"macOS: {version}" if version else "macOS: could not determine version")
    memory = sensors.get_int(SensorName.SYSTEM_MEMORY_BYTES)
    if memory:
        section.note(f"Memory: {memory // _GB} GB")
    section.note(f"Date: {now:%B %d, %Y at %I:%M %p}")
    return section
