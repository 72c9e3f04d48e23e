from __future__ import annotations

from dataclasses import dataclass

from checkup.models.enums import Severity
from checkup.models.finding import Finding, Section
from checkup.sensors.base import SensorName, Sensors


@dataclass(slots=True, frozen=True)
class _Toggle:
    sensor: SensorName
    subject: str
    # Severity when the setting is in its unsafe state.
    unsafe_when: bool
    unsafe_severity: Severity
    advice: str | None = None


_TOGGLES: tuple[_Toggle, ...] = (
    _Toggle(
        SensorName.FIREWALL_ENABLED,
        "Firewall",
        False,
        Severity.WARNING,
        "Firewall is off. Enable it in System Settings → Network → Firewall.",
    ),
    _Toggle(
        SensorName.DISK_ENCRYPTION_ENABLED,
        "FileVault (disk encryption)",
        False,
        Severity.WARNING,
        "FileVault is off. Enable disk encryption to protect your data if the Mac is lost/stolen.",
    ),
    _Toggle(
        SensorName.SIP_ENABLED,
        "System Integrity Protection",
        False,
        Severity.CRITICAL,
        "SIP is disabled! This is a major security risk. Re-enable via Recovery Mode.",
    ),
    _Toggle(SensorName.REMOTE_LOGIN_ENABLED, "Remote Login (SSH)", True, Severity.WARNING),
    _Toggle(SensorName.SCREEN_SHARING_ENABLED, "Screen Sharing", True, Severity.WARNING),
    _Toggle(SensorName.GATEKEEPER_ENABLED, "Gatekeeper (app verification)", False, Severity.WARNING),
)


def toggle_finding(toggle: _Toggle, enabled: bool | None) -> Finding | None:
    if enabled is None:
        return None
    state = "ON" if enabled else "OFF"
    if enabled is toggle.unsafe_when:
        return Finding(toggle.subject, toggle.unsafe_severity, f"{toggle.subject}: {state}", recommendation=toggle.advice)
    return Finding(toggle.subject, Severity.GOOD, f"{toggle.subject}: {state}")


def check_security(sensors: Sensors) -> Section:
    section = Section("Security Check")
    for toggle in _TOGGLES:
        finding = toggle_finding(toggle, sensors.get_bool(toggle.sensor))
        if finding is None:
            section.note(f"{toggle.subject}: could not determine")
        section.add(finding)
    return section
