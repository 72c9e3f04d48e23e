# Sensors backed by the live macOS host.
#
# Cross-platform readings (memory, swap, disk, processes, CPU, boot time,
# charge level) come from psutil.  Everything Apple-specific shells out to the
# stock command-line tools; their output is parsed by the pure ``parse_*``
# helpers below so the parsing can be exercised without a Mac.

from __future__ import annotations

import json
import logging
import os
import platform
import plistlib
import re
import socket
import time
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from typing_extensions import override

import psutil
from result import Err, Ok

from checkup.sensors.base import SensorName, SensorResult, Sensors, unavailable
from checkup.services.commands import DEFAULT_RUNNER, CommandRunner
from checkup.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)

AIRPORT = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/Current/Resources/airport"
FIREWALL = "/usr/libexec/ApplicationFirewall/socketfilterfw"
ICLOUD_DRIVE = "~/Library/Mobile Documents/com~apple~CloudDocs"
STATS_APP_PATHS = ("/Applications/Stats.app", "~/Applications/Stats.app")
PING_HOST = "8.8.8.8"
DNS_PROBE_HOST = "apple.com"

_MB = 1024 * 1024
_ENABLED_RE = re.compile(r"\b(enabled|disabled)\b", re.IGNORECASE)
_ON_OFF_RE = re.compile(r":\s*(On|Off)\b", re.IGNORECASE)


# --- pure parsers -------------------------------------------------------------


def parse_ioreg_battery(data: bytes) -> dict[str, Any] | None:
    """First AppleSmartBattery registry entry from ``ioreg -a`` output, or None."""
    if not data.strip():
        return None
    payload = plistlib.loads(data)
    if isinstance(payload, list):
        payload = payload[0] if payload else None
    return payload if isinstance(payload, dict) else None


def cell_voltages(battery: dict[str, Any]) -> list[int] | None:
    cells = battery.get("CellVoltage")
    if cells is None:
        cells = (battery.get("BatteryData") or {}).get("CellVoltage")
    if not isinstance(cells, list):
        return None
    return [int(v) for v in cells]


def parse_power_profile(text: str) -> dict[str, Any]:
    """Condition and cycle count from ``system_profiler SPPowerDataType -json``."""
    payload = json.loads(text)
    for item in payload.get("SPPowerDataType", []):
        health = item.get("sppower_battery_health_info")
        if isinstance(health, dict):
            return {
                "condition": health.get("sppower_battery_health"),
                "cycle_count": health.get("sppower_battery_cycle_count"),
            }
    return {}


def parse_hardware_profile(text: str) -> dict[str, Any]:
    payload = json.loads(text)
    items = payload.get("SPHardwareDataType") or [{}]
    item = items[0]
    return {
        "model": item.get("machine_name"),
        "chip": item.get("chip_type") or item.get("cpu_type"),
    }


def parse_smart_status(text: str) -> str | None:
    for line in text.splitlines():
        if "SMART Status" in line and ":" in line:
            return line.split(":", 1)[1].strip() or None
    return None


def parse_memory_pressure(text: str) -> int | None:
    match = re.search(r"System-wide memory free percentage:\s*(\d+)%", text)
    return int(match.group(1)) if match else None


def parse_key_values(text: str) -> dict[str, str]:
    """``key: value`` lines, keys stripped (``airport -I``, ``tmutil destinationinfo``)."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        values.setdefault(key.strip(), value.strip())
    return values


def parse_airport_power(text: str) -> bool | None:
    match = _ON_OFF_RE.search(text)
    if match is None:
        return None
    return match.group(1).lower() == "on"


def parse_airport_network(text: str) -> str:
    if "not associated" in text.lower():
        return ""
    if ":" not in text:
        return ""
    return text.split(":", 1)[1].strip()


def parse_ping_ms(text: str) -> float | None:
    match = re.search(r"time[=<]([\d.]+)\s*ms", text)
    return float(match.group(1)) if match else None


def parse_backup_timestamp(text: str) -> float | None:
    """Epoch seconds of the snapshot named by ``tmutil latestbackup``."""
    match = re.search(r"(\d{4}-\d{2}-\d{2})(?:-(\d{6}))?", text)
    if match is None:
        return None
    stamp = match.group(1) + (match.group(2) or "000000")
    moment = datetime.strptime(stamp, "%Y-%m-%d%H%M%S")
    return moment.timestamp()


def parse_enabled(text: str) -> bool | None:
    match = _ENABLED_RE.search(text)
    if match is None:
        return None
    return match.group(1).lower() == "enabled"


def parse_filevault(text: str) -> bool | None:
    if "FileVault is On" in text:
        return True
    if "FileVault is Off" in text:
        return False
    return None


def parse_on_off(text: str) -> bool | None:
    return parse_airport_power(text)


def parse_update_count(text: str) -> int:
    return sum(1 for line in text.splitlines() if line.strip().startswith("* Label:"))


def parse_login_items(text: str) -> list[str]:
    return [name.strip() for name in text.split(",") if name.strip()]


def parse_mdls_date(text: str) -> float | None:
    if "(null)" in text:
        return None
    match = re.search(r"=\s*(\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}) \+0000", text)
    if match is None:
        return None
    moment = datetime.strptime(match.group(1), "%Y-%m-%d %H:%M:%S").replace(tzinfo=timezone.utc)
    return moment.timestamp()


# --- live collector -----------------------------------------------------------


class MacSensors(Sensors):
    """Live sensors.  Each expensive source is queried at most once per run."""

    def __init__(
        self,
        runner: CommandRunner = DEFAULT_RUNNER,
        fs: FileSystem = DEFAULT_FS,
        applications_dir: str = "/Applications",
        interface: str = "en0",
    ) -> None:
        self.runner = runner
        self.fs = fs
        self.applications_dir = applications_dir
        self.interface = interface
        self._cache: dict[str, Any] = {}
        self._readers: dict[SensorName, Callable[[], Any]] = {
            SensorName.SYSTEM_MODEL: lambda: self._hardware().get("model"),
            SensorName.SYSTEM_CHIP: lambda: self._hardware().get("chip"),
            SensorName.SYSTEM_ARCH: platform.machine,
            SensorName.SYSTEM_OS_VERSION: lambda: platform.mac_ver()[0] or None,
            SensorName.SYSTEM_MEMORY_BYTES: lambda: psutil.virtual_memory().total,
            SensorName.SYSTEM_UPTIME_SECONDS: lambda: int(time.time() - psutil.boot_time()),
            SensorName.BATTERY_PRESENT: lambda: self._battery() is not None,
            SensorName.BATTERY_MAX_CAPACITY: lambda: self._battery_key("AppleRawMaxCapacity", "MaxCapacity"),
            SensorName.BATTERY_DESIGN_CAPACITY: lambda: self._battery_key("DesignCapacity"),
            SensorName.BATTERY_CYCLE_COUNT: self._cycle_count,
            SensorName.BATTERY_DESIGN_CYCLES: lambda: self._battery_key("DesignCycleCount9C"),
            SensorName.BATTERY_TEMPERATURE_RAW: lambda: self._battery_key("Temperature"),
            SensorName.BATTERY_CELL_VOLTAGES: lambda: cell_voltages(self._battery() or {}),
            SensorName.BATTERY_VOLTAGE: lambda: self._battery_key("Voltage"),
            SensorName.BATTERY_AMPERAGE_RAW: lambda: self._battery_key("InstantAmperage", "Amperage"),
            SensorName.BATTERY_IS_CHARGING: lambda: self._battery_key("IsCharging"),
            SensorName.BATTERY_EXTERNAL_CONNECTED: lambda: self._battery_key("ExternalConnected"),
            SensorName.BATTERY_FULLY_CHARGED: lambda: self._battery_key("FullyCharged"),
            SensorName.BATTERY_CONDITION: lambda: self._power_profile().get("condition"),
            SensorName.BATTERY_CHARGE_PERCENT: self._charge_percent,
            SensorName.BATTERY_TIME_REMAINING: self._time_remaining,
            SensorName.DISK_TOTAL: lambda: psutil.disk_usage("/").total,
            SensorName.DISK_USED: lambda: psutil.disk_usage("/").used,
            SensorName.DISK_AVAILABLE: lambda: psutil.disk_usage("/").free,
            SensorName.DISK_SMART_STATUS: lambda: self._parsed(("diskutil", "info", "disk0"), parse_smart_status),
            SensorName.MEMORY_FREE_PERCENT: self._memory_free,
            SensorName.MEMORY_SWAP_USED_MB: lambda: round(psutil.swap_memory().used / _MB),
            SensorName.PROCESS_TABLE: lambda: self._memo("processes", self._process_table),
            SensorName.HARDWARE_CPU_PHYSICAL: lambda: psutil.cpu_count(logical=False),
            SensorName.HARDWARE_CPU_LOGICAL: lambda: psutil.cpu_count(logical=True),
            SensorName.HARDWARE_CPU_FREQ_MHZ: self._cpu_freq,
            SensorName.HARDWARE_FAN_RPM: self._fans,
            SensorName.WIFI_POWER: lambda: self._parsed(
                ("networksetup", "-getairportpower", self.interface), parse_airport_power
            ),
            SensorName.WIFI_SSID: lambda: self._parsed(
                ("networksetup", "-getairportnetwork", self.interface), parse_airport_network
            ),
            SensorName.WIFI_RSSI: lambda: self._airport().get("agrCtlRSSI"),
            SensorName.WIFI_CHANNEL: self._wifi_channel,
            SensorName.INTERNET_REACHABLE: lambda: self._ping() is not None,
            SensorName.PING_MS: self._ping,
            SensorName.DNS_OK: self._dns_ok,
            SensorName.BACKUP_DESTINATION: self._backup_destination,
            SensorName.BACKUP_LAST_SUCCESS: lambda: self._parsed(("tmutil", "latestbackup"), parse_backup_timestamp),
            SensorName.BACKUP_ICLOUD_DRIVE: lambda: self.fs.is_dir(self.fs.expanduser(ICLOUD_DRIVE)),
            SensorName.FIREWALL_ENABLED: lambda: self._parsed((FIREWALL, "--getglobalstate"), parse_enabled),
            SensorName.DISK_ENCRYPTION_ENABLED: lambda: self._parsed(("fdesetup", "status"), parse_filevault),
            SensorName.SIP_ENABLED: lambda: self._parsed(("csrutil", "status"), parse_enabled),
            SensorName.REMOTE_LOGIN_ENABLED: lambda: self._parsed(("systemsetup", "-getremotelogin"), parse_on_off),
            SensorName.SCREEN_SHARING_ENABLED: lambda: self._parsed(
                ("launchctl", "list"), lambda text: "com.apple.screensharing" in text
            ),
            SensorName.GATEKEEPER_ENABLED: lambda: self._parsed(("spctl", "--status"), parse_enabled),
            SensorName.UPDATES_AVAILABLE: lambda: self._parsed(
                ("softwareupdate", "-l"), parse_update_count, timeout=60
            ),
            SensorName.STATS_APP_INSTALLED: lambda: any(
                self.fs.is_dir(self.fs.expanduser(p)) for p in STATS_APP_PATHS
            ),
            SensorName.APP_INVENTORY: self._app_inventory,
            SensorName.LOGIN_ITEMS: lambda: self._parsed(
                ("osascript", "-e", 'tell application "System Events" to get the name of every login item'),
                parse_login_items,
            ),
            SensorName.REDUCE_MOTION: lambda: self._defaults("com.apple.universalaccess", "reduceMotion"),
            SensorName.REDUCE_TRANSPARENCY: lambda: self._defaults("com.apple.universalaccess", "reduceTransparency"),
        }

    @override
    def _read(self, name: SensorName) -> SensorResult:
        reader = self._readers.get(name)
        if reader is None:
            return unavailable(name)
        return Ok(reader())

    # --- shared sources ---------------------------------------------------

    def _memo(self, key: str, load: Callable[[], Any]) -> Any:
        if key not in self._cache:
            self._cache[key] = load()
        return self._cache[key]

    def _stdout(self, argv: tuple[str, ...], timeout: float | None = None) -> str | None:
        def load() -> str | None:
            outcome = self.runner.run(argv, timeout=timeout)
            if isinstance(outcome, Err):
                logger.debug("%s unavailable: %s", argv[0], outcome.err_value.message)
                return None
            return outcome.ok_value.stdout

        return self._memo("cmd:" + " ".join(argv), load)

    def _parsed(self, argv: tuple[str, ...], parse: Callable[[str], Any], timeout: float | None = None) -> Any:
        text = self._stdout(argv, timeout)
        return None if text is None else parse(text)

    def _battery(self) -> dict[str, Any] | None:
        def load() -> dict[str, Any] | None:
            outcome = self.runner.run(("ioreg", "-a", "-r", "-c", "AppleSmartBattery"))
            if isinstance(outcome, Err):
                return None
            return parse_ioreg_battery(outcome.ok_value.stdout.encode("utf-8"))

        return self._memo("battery", load)

    def _battery_key(self, *keys: str) -> Any:
        battery = self._battery() or {}
        for key in keys:
            if key in battery:
                return battery[key]
        return None

    def _hardware(self) -> dict[str, Any]:
        return (
            self._parsed(("system_profiler", "SPHardwareDataType", "-json"), parse_hardware_profile, timeout=30) or {}
        )

    def _power_profile(self) -> dict[str, Any]:
        return self._parsed(("system_profiler", "SPPowerDataType", "-json"), parse_power_profile, timeout=30) or {}

    def _airport(self) -> dict[str, str]:
        return self._parsed((AIRPORT, "-I"), parse_key_values) or {}

    # --- individual readings ----------------------------------------------

    def _cycle_count(self) -> Any:
        from_registry = self._battery_key("CycleCount")
        if from_registry is not None:
            return from_registry
        return self._power_profile().get("cycle_count")

    def _charge_percent(self) -> int | None:
        battery = psutil.sensors_battery()
        return round(battery.percent) if battery is not None else None

    def _time_remaining(self) -> int | None:
        battery = psutil.sensors_battery()
        if battery is None or battery.secsleft in (psutil.POWER_TIME_UNLIMITED, psutil.POWER_TIME_UNKNOWN):
            return None
        return int(battery.secsleft // 60)

    def _memory_free(self) -> int | None:
        reported = self._parsed(("memory_pressure",), parse_memory_pressure)
        if reported is not None:
            return reported
        memory = psutil.virtual_memory()
        return int(memory.available * 100 // memory.total) if memory.total else None

    def _process_table(self) -> list[dict[str, Any]]:
        processes = list(psutil.process_iter())
        for proc in processes:
            try:
                proc.cpu_percent(None)
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                continue
        time.sleep(0.3)
        rows: list[dict[str, Any]] = []
        for proc in processes:
            try:
                with proc.oneshot():
                    rows.append(
                        {
                            "pid": proc.pid,
                            "name": proc.name(),
                            "cpu_pct": proc.cpu_percent(None),
                            "mem_pct": proc.memory_percent(),
                            "rss_bytes": proc.memory_info().rss,
                        }
                    )
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
        return rows

    def _cpu_freq(self) -> float | None:
        freq = psutil.cpu_freq()
        return freq.current if freq is not None and freq.current else None

    def _fans(self) -> list[int] | None:
        # psutil exposes fans on Linux only; Macs report nothing here.
        reader = getattr(psutil, "sensors_fans", None)
        if reader is None:
            return None
        speeds = [int(fan.current) for entries in reader().values() for fan in entries]
        return speeds or None

    def _wifi_channel(self) -> int | None:
        raw = self._airport().get("channel")
        if not raw:
            return None
        head = raw.split(",", 1)[0].strip()
        return int(head) if head.isdigit() else None

    def _ping(self) -> float | None:
        return self._parsed(("ping", "-c", "1", "-t", "5", PING_HOST), parse_ping_ms)

    def _dns_ok(self) -> bool:
        try:
            socket.getaddrinfo(DNS_PROBE_HOST, 443)
        except OSError:
            return False
        return True

    def _backup_destination(self) -> str | None:
        outcome = self.runner.run(("tmutil", "destinationinfo"), check=False)
        if isinstance(outcome, Err):
            return None
        # "No destinations configured." is reported on stdout with a non-zero exit.
        return parse_key_values(outcome.ok_value.stdout).get("Name", "")

    def _defaults(self, domain: str, key: str) -> bool | None:
        return self._parsed(("defaults", "read", domain, key), lambda text: text.strip() == "1")

    def _app_inventory(self) -> list[dict[str, Any]]:
        inventory: list[dict[str, Any]] = []
        for entry in self.fs.listdir(self.applications_dir):
            if not entry.is_dir or not entry.name.endswith(".app"):
                continue
            last_used = self._parsed(("mdls", "-name", "kMDItemLastUsedDate", entry.path), parse_mdls_date)
            inventory.append(
                {"name": entry.name.removesuffix(".app"), "path": entry.path, "last_used_ts": last_used}
            )
        return inventory


def default_sensors(runner: CommandRunner = DEFAULT_RUNNER, applications_dir: str = "/Applications") -> Sensors:
    if os.uname().sysname != "Darwin":
        logger.info("not running on macOS; Apple-specific readings will be unavailable")
    return MacSensors(runner=runner, applications_dir=applications_dir)
