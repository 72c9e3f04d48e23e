"""Unit conversions from raw sensor readings to the normalized values the
threshold tables are written against.

Percentages derived from two integer counters are floored (89.9% is 89%),
matching the integer arithmetic the thresholds were tuned on.
"""

from __future__ import annotations

from collections.abc import Iterable

SECONDS_PER_DAY = 86_400
# Fixed 30-day month used for every "months ago" figure in the report.
SECONDS_PER_MONTH = 2_592_000

_UINT64_RANGE = 1 << 64
_AMPERAGE_OVERFLOW = 1_000_000


def ratio_percent(numerator: int | float | None, denominator: int | float | None) -> int | None:
    if numerator is None or denominator is None:
        return None
    if denominator <= 0:
        return None
    return int(numerator * 100) // int(denominator)


def health_percent(max_capacity: int | None, design_capacity: int | None) -> int | None:
    return ratio_percent(max_capacity, design_capacity)


def cycle_percent(cycle_count: int | None, design_cycles: int | None) -> int | None:
    return ratio_percent(cycle_count, design_cycles)


def disk_percent(used_bytes: int | None, total_bytes: int | None) -> int | None:
    return ratio_percent(used_bytes, total_bytes)


def celsius_from_raw(raw: int | float | None) -> float | None:
    """Battery gauge reports hundredths of a degree Celsius."""
    if raw is None or raw <= 0:
        return None
    return raw / 100


def fahrenheit(celsius: float) -> float:
    return celsius * 9 / 5 + 32


def cell_spread_mv(voltages: Iterable[int | float] | None) -> int | None:
    if voltages is None:
        return None
    cells = [int(v) for v in voltages if v is not None and int(v) > 0]
    if not cells:
        return None
    return max(cells) - min(cells)


def volts_from_mv(millivolts: int | float | None) -> float | None:
    if millivolts is None or millivolts <= 0:
        return None
    return millivolts / 1000


def amperage_ma(raw: int | None) -> tuple[int, str] | None:
    """Decode the gauge's instantaneous current.

    Discharge current is reported as an unsigned 64-bit wrap of a negative
    number; anything above one ampere-million is treated as wrapped.
    Returns ``(milliamps, direction)``.
    """
    if raw is None:
        return None
    if raw > _AMPERAGE_OVERFLOW:
        return _UINT64_RANGE - raw, "discharging"
    if raw < 0:
        return -raw, "discharging"
    return raw, "charging"


def days_between(earlier_ts: float, now_ts: float) -> int:
    return int(now_ts - earlier_ts) // SECONDS_PER_DAY


def months_between(earlier_ts: float, now_ts: float) -> int:
    return int(now_ts - earlier_ts) // SECONDS_PER_MONTH


def wifi_band(channel: int | None) -> str | None:
    if channel is None or channel <= 0:
        return None
    return "2.4 GHz" if channel <= 14 else "5 GHz"
