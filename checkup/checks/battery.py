from __future__ import annotations

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.classify import evaluate
from checkup.services.formatting import format_duration
from checkup.services.units import cell_spread_mv, celsius_from_raw, cycle_percent, fahrenheit, health_percent


def condition_finding(condition: str | None) -> Finding | None:
    """Map Apple's own battery condition string onto a severity."""
    if not condition:
        return None
    token = condition.lower()
    if token == "normal":
        return Finding("Battery Condition", Severity.GOOD, "Apple says: Normal")
    if "service" in token:
        return Finding("Battery Condition", Severity.WARNING, f"Apple says: {condition}")
    if "replace" in token:
        return Finding(
            "Battery Condition",
            Severity.CRITICAL,
            f"Apple says: {condition}",
            recommendation="macOS reports the battery needs replacing. Book a battery service.",
        )
    return None


def _health(section: Section, sensors: Sensors) -> None:
    max_cap = sensors.get_int(SensorName.BATTERY_MAX_CAPACITY)
    design_cap = sensors.get_int(SensorName.BATTERY_DESIGN_CAPACITY)
    health = health_percent(max_cap, design_cap)
    if health is None:
        section.note("Battery health: could not determine", Severity.WARNING)
    else:
        section.add(evaluate(Metric.BATTERY_HEALTH, health, "Battery Health", "Battery health: {value}% ({label})"))
        section.note(f"Capacity: {max_cap} mAh of {design_cap} mAh original")
    section.add(condition_finding(sensors.get_text(SensorName.BATTERY_CONDITION)))


def _cycles(section: Section, sensors: Sensors) -> None:
    count = sensors.get_int(SensorName.BATTERY_CYCLE_COUNT)
    if count is None:
        section.note("Cycle count: could not determine", Severity.WARNING)
        return
    design = sensors.get_int(SensorName.BATTERY_DESIGN_CYCLES)
    pct = cycle_percent(count, design)
    if pct is None:
        section.note(f"Cycles used: {count}")
        return
    section.add(
        evaluate(
            Metric.CYCLE_USAGE,
            pct,
            "Battery Cycles",
            "Cycles used: {count} of {design} ({value}% of lifespan)",
            count=count,
            design=design,
        )
    )


def _power(section: Section, sensors: Sensors) -> None:
    section.heading("Power & Charging")
    if sensors.get_bool(SensorName.BATTERY_EXTERNAL_CONNECTED):
        section.note("Power adapter: Connected")
        if sensors.get_bool(SensorName.BATTERY_IS_CHARGING):
            section.add(Finding("Charging", Severity.GOOD, "Charging: Yes"))
        elif sensors.get_bool(SensorName.BATTERY_FULLY_CHARGED):
            section.add(Finding("Charging", Severity.GOOD, "Status: Fully charged"))
        else:
            section.add(Finding("Charging", Severity.WARNING, "Plugged in but NOT charging"))
            section.note("Could be Optimized Charging, a charge limiter, or a problem")
    else:
        section.note("Power adapter: Not connected, running on battery")
        remaining = sensors.get_int(SensorName.BATTERY_TIME_REMAINING)
        if remaining:
            section.note(f"Time remaining: ~{format_duration(remaining)}")
    charge = sensors.get_int(SensorName.BATTERY_CHARGE_PERCENT)
    section.note(f"Charge level: {charge}%" if charge is not None else "Charge level: unknown")


def _temperature(section: Section, sensors: Sensors) -> None:
    celsius = celsius_from_raw(sensors.get_float(SensorName.BATTERY_TEMPERATURE_RAW))
    if celsius is None:
        return
    section.add(
        evaluate(
            Metric.BATTERY_TEMPERATURE,
            celsius,
            "Battery Temperature",
            "Temperature: {fahrenheit:.1f}°F / {celsius:.1f}°C ({label})",
            fahrenheit=fahrenheit(celsius),
            celsius=celsius,
        )
    )


def _cells(section: Section, sensors: Sensors) -> None:
    spread = cell_spread_mv(sensors.get_list(SensorName.BATTERY_CELL_VOLTAGES))
    if spread is None:
        return
    section.add(evaluate(Metric.CELL_BALANCE, spread, "Cell Balance", "Cell balance: {value} mV spread ({label})"))


def check_battery(sensors: Sensors) -> Section:
    section = Section("Battery Health")
    present = sensors.get_bool(SensorName.BATTERY_PRESENT)
    if present is False or (present is None and sensors.get(SensorName.BATTERY_MAX_CAPACITY) is None):
        section.note("No battery detected, this appears to be a desktop Mac")
        return section
    _health(section, sensors)
    _cycles(section, sensors)
    _power(section, sensors)
    _temperature(section, sensors)
    _cells(section, sensors)
    return section
