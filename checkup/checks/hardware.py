from __future__ import annotations

from checkup.models.finding import Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.units import amperage_ma, volts_from_mv


def check_hardware(sensors: Sensors) -> Section:
    """Detailed electrical and thermal readings.  Informational only."""
    section = Section("Hardware Detail")

    volts = volts_from_mv(sensors.get_float(SensorName.BATTERY_VOLTAGE))
    if volts is not None:
        section.note(f"Battery voltage: {volts:.2f} V")
    current = amperage_ma(sensors.get_int(SensorName.BATTERY_AMPERAGE_RAW))
    if current is not None:
        milliamps, direction = current
        section.note(f"Battery current: {milliamps} mA ({direction})")

    fans = sensors.get_list(SensorName.HARDWARE_FAN_RPM)
    if fans:
        for index, rpm in enumerate(fans, start=1):
            section.note(f"Fan {index}: {int(rpm)} RPM")
    else:
        section.note("Fans: no readings (fanless model or sensor not exposed)")

    physical = sensors.get_int(SensorName.HARDWARE_CPU_PHYSICAL)
    logical = sensors.get_int(SensorName.HARDWARE_CPU_LOGICAL)
    if physical or logical:
        section.note(f"CPU cores: {physical or '?'} physical, {logical or '?'} logical")
    freq = sensors.get_float(SensorName.HARDWARE_CPU_FREQ_MHZ)
    if freq:
        section.note(f"CPU frequency: {freq:.0f} MHz")
    if not section.entries:
        section.note("Could not determine hardware details")
    return section
