"""Metric-to-severity classification.

Every metric has an ordered tier table; tiers are evaluated top-down and the
first whose bound the value satisfies wins.  The final tier of each table has
no bound and catches everything else.  A missing sample classifies to
``None``; callers turn that into "could not determine", never into a finding.
"""

from __future__ import annotations

from typing import TypeAlias

import operator
from collections.abc import Callable
from dataclasses import dataclass

from checkup.models.enums import Metric, Severity
from checkup.models.finding import Finding

Compare: TypeAlias = Callable[[float, float], bool]


@dataclass(slots=True, frozen=True)
class Tier:
    bound: float | None
    severity: Severity
    label: str
    advice: str | None = None


@dataclass(slots=True, frozen=True)
class ThresholdTable:
    metric: Metric
    compare: Compare
    tiers: tuple[Tier, ...]
    truncate: bool = True

    def match(self, value: float) -> Tier:
        probe = int(value) if self.truncate else value
        for tier in self.tiers:
            if tier.bound is None or self.compare(probe, tier.bound):
                return tier
        return self.tiers[-1]


_G = Severity.GOOD
_W = Severity.WARNING
_C = Severity.CRITICAL

TABLES: dict[Metric, ThresholdTable] = {
    Metric.BATTERY_HEALTH: ThresholdTable(
        Metric.BATTERY_HEALTH,
        operator.ge,
        (
            Tier(90, _G, "Excellent"),
            Tier(80, _G, "Good"),
            Tier(
                70,
                _W,
                "Worn",
                "Battery health is below 80%. Consider replacement when battery life becomes a daily annoyance.",
            ),
            Tier(50, _C, "Degraded", "Battery is significantly degraded at {value}%. Replacement recommended."),
            Tier(None, _C, "Critical", "Battery health is critical. Replace immediately to avoid unexpected shutdowns."),
        ),
    ),
    Metric.CYCLE_USAGE: ThresholdTable(
        Metric.CYCLE_USAGE,
        operator.le,
        (
            Tier(50, _G, "Plenty of life left"),
            Tier(80, _G, "Well-used, within normal range"),
            Tier(
                100,
                _W,
                "Approaching the designed cycle limit",
                "Battery is at {value}% of its designed cycle life ({count}/{design} cycles).",
            ),
            Tier(None, _C, "Over designed limit", "Battery has exceeded its designed cycle limit of {design} cycles."),
        ),
    ),
    Metric.CELL_BALANCE: ThresholdTable(
        Metric.CELL_BALANCE,
        operator.le,
        (
            Tier(30, _G, "Excellent"),
            Tier(50, _G, "Good"),
            Tier(100, _W, "Uneven"),
            Tier(
                None,
                _C,
                "Failing cell likely",
                "Significant cell voltage imbalance detected. A battery cell may be failing.",
            ),
        ),
    ),
    Metric.DISK_USAGE: ThresholdTable(
        Metric.DISK_USAGE,
        operator.lt,
        (
            Tier(70, _G, "Plenty of space"),
            Tier(85, _W, "Getting a bit full"),
            Tier(
                95,
                _C,
                "Low space",
                "Disk is {value}% full with only {available} free. Clean up to prevent slowdowns.",
            ),
            Tier(
                None,
                _C,
                "Critically low",
                "CRITICAL: Disk is almost full! Clean up immediately to prevent crashes and data loss.",
            ),
        ),
    ),
    Metric.MEMORY_FREE: ThresholdTable(
        Metric.MEMORY_FREE,
        operator.ge,
        (
            Tier(30, _G, "Healthy"),
            Tier(15, _W, "Getting tight"),
            Tier(
                None,
                _C,
                "Under pressure",
                "Memory is under heavy pressure. Close unused apps, especially browsers with many tabs.",
            ),
        ),
    ),
    Metric.SWAP_USED: ThresholdTable(
        Metric.SWAP_USED,
        operator.gt,
        (
            Tier(
                1000,
                _W,
                "Using disk as overflow memory",
                "High swap usage ({value} MB). A restart would free this up and speed things up.",
            ),
            Tier(None, _G, "Normal"),
        ),
    ),
    Metric.WIFI_SIGNAL: ThresholdTable(
        Metric.WIFI_SIGNAL,
        operator.ge,
        (
            Tier(-50, _G, "Excellent"),
            Tier(-60, _G, "Good"),
            Tier(-70, _W, "Fair"),
            Tier(
                None,
                _C,
                "Weak",
                "Wi-Fi signal is weak ({value} dBm). Move closer to the router or consider a mesh system.",
            ),
        ),
    ),
    Metric.NETWORK_LATENCY: ThresholdTable(
        Metric.NETWORK_LATENCY,
        operator.lt,
        (
            Tier(20, _G, "Excellent"),
            Tier(50, _G, "Good"),
            Tier(100, _W, "Slow"),
            Tier(None, _C, "Very slow", "Internet latency is very high ({value} ms). Check your router or ISP."),
        ),
    ),
    Metric.BACKUP_AGE: ThresholdTable(
        Metric.BACKUP_AGE,
        operator.le,
        (
            Tier(1, _G, "Today"),
            Tier(7, _G, "Recent"),
            Tier(30, _W, "Consider running a backup soon"),
            Tier(
                None,
                _C,
                "Your data is at risk",
                "Last Time Machine backup was {value} days ago. Back up immediately.",
            ),
        ),
    ),
    Metric.UPTIME: ThresholdTable(
        Metric.UPTIME,
        operator.gt,
        (
            Tier(
                14,
                _W,
                "Overdue for a restart",
                "Your Mac has been running for {value} days. A restart clears memory leaks, swap and temporary files.",
            ),
            Tier(None, _G, "Recent restart"),
        ),
    ),
    Metric.PROCESS_CPU: ThresholdTable(
        Metric.PROCESS_CPU,
        operator.ge,
        (
            Tier(50, _C, "Heavy CPU use"),
            Tier(20, _W, "Elevated CPU use"),
            Tier(None, _G, "Normal"),
        ),
    ),
    Metric.PROCESS_MEMORY: ThresholdTable(
        Metric.PROCESS_MEMORY,
        operator.ge,
        (
            Tier(10, _W, "Large memory footprint"),
            Tier(None, _G, "Normal"),
        ),
    ),
}


def _classify_temperature(celsius: float) -> Tier:
    whole = int(celsius)
    if 10 <= whole <= 35:
        return Tier(35, _G, "Normal")
    if whole <= 45:
        return Tier(45, _W, "Cold" if whole < 10 else "Warm")
    return Tier(
        None,
        _C,
        "Hot",
        "Battery temperature is dangerously high. Let the Mac cool down and check for runaway apps.",
    )


def classify(metric: Metric, value: float | None) -> Tier | None:
    if value is None:
        return None
    if metric is Metric.BATTERY_TEMPERATURE:
        return _classify_temperature(value)
    return TABLES[metric].match(value)


def severity_of(metric: Metric, value: float | None) -> Severity | None:
    tier = classify(metric, value)
    return tier.severity if tier is not None else None


def evaluate(
    metric: Metric,
    value: float | None,
    subject: str,
    message: str,
    *,
    advice: str | None = None,
    **fields: object,
) -> Finding | None:
    """Classify *value* and wrap it in a Finding.

    ``message`` and the tier's advice are formatted with ``value``, ``label``
    and any extra keyword *fields*.  Good tiers never carry a recommendation;
    ``advice`` overrides the table text for the others.
    """
    if value is None:
        return None
    tier = classify(metric, value)
    if tier is None:
        return None
    shown = int(value) if float(value).is_integer() else value
    text = message.format(value=shown, label=tier.label, **fields)
    recommendation = None
    if tier.severity is not Severity.GOOD:
        template = advice if advice is not None else tier.advice
        if template is not None:
            recommendation = template.format(value=shown, label=tier.label, **fields)
    return Finding(subject, tier.severity, text, float(value), recommendation)
