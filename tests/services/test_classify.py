from __future__ import annotations

import pytest

from checkup.models.enums import Metric, Severity
from checkup.services.classify import classify, evaluate, severity_of


class TestBatteryHealth:
    @pytest.mark.parametrize(
        ("health", "severity", "label"),
        [
            (100, Severity.GOOD, "Excellent"),
            (90, Severity.GOOD, "Excellent"),
            (89, Severity.GOOD, "Good"),
            (80, Severity.GOOD, "Good"),
            (79, Severity.WARNING, "Worn"),
            (70, Severity.WARNING, "Worn"),
            (69, Severity.CRITICAL, "Degraded"),
            (50, Severity.CRITICAL, "Degraded"),
            (49, Severity.CRITICAL, "Critical"),
        ],
    )
    def test_boundaries_fall_on_the_lower_tier_edge(self, health: int, severity: Severity, label: str) -> None:
        tier = classify(Metric.BATTERY_HEALTH, health)
        assert tier is not None
        assert tier.severity is severity
        assert tier.label == label

    def test_fraction_is_truncated(self) -> None:
        assert severity_of(Metric.BATTERY_HEALTH, 79.9) is Severity.WARNING


class TestDiskUsage:
    def test_severity_never_decreases_as_usage_grows(self) -> None:
        order = list(Severity)
        ranks = [order.index(severity_of(Metric.DISK_USAGE, pct)) for pct in range(0, 101)]  # type: ignore[arg-type]
        assert ranks == sorted(ranks)

    @pytest.mark.parametrize(
        ("pct", "label"),
        [(69, "Plenty of space"), (70, "Getting a bit full"), (85, "Low space"), (95, "Critically low")],
    )
    def test_tier_labels(self, pct: int, label: str) -> None:
        tier = classify(Metric.DISK_USAGE, pct)
        assert tier is not None and tier.label == label


class TestCellBalance:
    @pytest.mark.parametrize(
        ("spread_mv", "severity", "label"),
        [
            (0, Severity.GOOD, "Excellent"),
            (30, Severity.GOOD, "Excellent"),
            (31, Severity.GOOD, "Good"),
            (50, Severity.GOOD, "Good"),
            (51, Severity.WARNING, "Uneven"),
            (100, Severity.WARNING, "Uneven"),
            (101, Severity.CRITICAL, "Failing cell likely"),
        ],
    )
    def test_upper_bounds_are_inclusive(self, spread_mv: int, severity: Severity, label: str) -> None:
        tier = classify(Metric.CELL_BALANCE, spread_mv)
        assert tier is not None
        assert tier.severity is severity
        assert tier.label == label


class TestMemoryFree:
    @pytest.mark.parametrize(
        ("free_pct", "severity", "label"),
        [
            (100, Severity.GOOD, "Healthy"),
            (30, Severity.GOOD, "Healthy"),
            (29, Severity.WARNING, "Getting tight"),
            (15, Severity.WARNING, "Getting tight"),
            (14, Severity.CRITICAL, "Under pressure"),
            (0, Severity.CRITICAL, "Under pressure"),
        ],
    )
    def test_lower_bounds_are_inclusive(self, free_pct: int, severity: Severity, label: str) -> None:
        tier = classify(Metric.MEMORY_FREE, free_pct)
        assert tier is not None
        assert tier.severity is severity
        assert tier.label == label

    def test_fraction_is_truncated(self) -> None:
        assert severity_of(Metric.MEMORY_FREE, 29.9) is Severity.WARNING


class TestOtherTables:
    def test_cycle_usage(self) -> None:
        assert severity_of(Metric.CYCLE_USAGE, 80) is Severity.GOOD
        assert severity_of(Metric.CYCLE_USAGE, 85) is Severity.WARNING
        assert severity_of(Metric.CYCLE_USAGE, 101) is Severity.CRITICAL

    def test_wifi_signal_is_higher_is_better(self) -> None:
        assert severity_of(Metric.WIFI_SIGNAL, -45) is Severity.GOOD
        assert severity_of(Metric.WIFI_SIGNAL, -65) is Severity.WARNING
        assert severity_of(Metric.WIFI_SIGNAL, -75) is Severity.CRITICAL

    def test_latency_uses_whole_milliseconds(self) -> None:
        assert severity_of(Metric.NETWORK_LATENCY, 49.9) is Severity.GOOD
        assert severity_of(Metric.NETWORK_LATENCY, 99.9) is Severity.WARNING
        assert severity_of(Metric.NETWORK_LATENCY, 100) is Severity.CRITICAL

    def test_swap_only_warns_above_a_gigabyte(self) -> None:
        assert severity_of(Metric.SWAP_USED, 1000) is Severity.GOOD
        assert severity_of(Metric.SWAP_USED, 1001) is Severity.WARNING

    def test_backup_age(self) -> None:
        assert classify(Metric.BACKUP_AGE, 0).label == "Today"  # type: ignore[union-attr]
        assert severity_of(Metric.BACKUP_AGE, 7) is Severity.GOOD
        assert severity_of(Metric.BACKUP_AGE, 30) is Severity.WARNING
        assert severity_of(Metric.BACKUP_AGE, 31) is Severity.CRITICAL


class TestTemperature:
    @pytest.mark.parametrize(
        ("celsius", "severity", "label"),
        [
            (9.9, Severity.WARNING, "Cold"),
            (10.0, Severity.GOOD, "Normal"),
            (35.9, Severity.GOOD, "Normal"),
            (36.0, Severity.WARNING, "Warm"),
            (45.5, Severity.WARNING, "Warm"),
            (46.0, Severity.CRITICAL, "Hot"),
        ],
    )
    def test_tiers(self, celsius: float, severity: Severity, label: str) -> None:
        tier = classify(Metric.BATTERY_TEMPERATURE, celsius)
        assert tier is not None
        assert (tier.severity, tier.label) == (severity, label)


class TestEvaluate:
    def test_missing_value_yields_nothing(self) -> None:
        assert classify(Metric.DISK_USAGE, None) is None
        assert evaluate(Metric.DISK_USAGE, None, "Disk", "{value}") is None

    def test_good_tier_has_no_recommendation(self) -> None:
        finding = evaluate(Metric.BATTERY_HEALTH, 95, "Battery Health", "Battery health: {value}% ({label})")
        assert finding is not None
        assert finding.severity is Severity.GOOD
        assert finding.message == "Battery health: 95% (Excellent)"
        assert finding.recommendation is None

    def test_critical_tier_formats_advice_with_fields(self) -> None:
        finding = evaluate(Metric.DISK_USAGE, 90, "Disk", "{value}%", available="12.0 GB")
        assert finding is not None
        assert finding.severity is Severity.CRITICAL
        assert finding.recommendation == "Disk is 90% full with only 12.0 GB free. Clean up to prevent slowdowns."

    def test_warning_tier_without_advice_stays_bare(self) -> None:
        finding = evaluate(Metric.DISK_USAGE, 75, "Disk", "{value}%")
        assert finding is not None
        assert finding.severity is Severity.WARNING
        assert finding.recommendation is None

    def test_advice_override(self) -> None:
        finding = evaluate(Metric.UPTIME, 20, "Uptime", "{value} days", advice="Restart after {value} days.")
        assert finding is not None
        assert finding.recommendation == "Restart after 20 days."
