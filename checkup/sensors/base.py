# Sensor layer: the only way the checks learn about the host.
#
# A sensor is a named query answering a scalar, a short text token, a list,
# or "not available".  Sensors.read() never raises; any failure inside a
# concrete collector is folded into an Err(SensorError) so a missing battery
# or an absent command-line tool degrades one line of the report instead of
# the whole run.

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeAlias

from result import Err, Ok, Result

logger = logging.getLogger(__name__)


class SensorName(str, Enum):
    SYSTEM_MODEL = "system.model"
    SYSTEM_CHIP = "system.chip"
    SYSTEM_ARCH = "system.arch"
    SYSTEM_OS_VERSION = "system.os_version"
    SYSTEM_MEMORY_BYTES = "system.memory_bytes"
    SYSTEM_UPTIME_SECONDS = "system.uptime_seconds"

    BATTERY_PRESENT = "battery.present"
    BATTERY_MAX_CAPACITY = "battery.max_capacity_mAh"
    BATTERY_DESIGN_CAPACITY = "battery.design_capacity_mAh"
    BATTERY_CYCLE_COUNT = "battery.cycle_count"
    BATTERY_DESIGN_CYCLES = "battery.design_cycle_limit"
    BATTERY_TEMPERATURE_RAW = "battery.temperature_raw"
    BATTERY_CELL_VOLTAGES = "battery.cell_voltages_mV"
    BATTERY_VOLTAGE = "battery.voltage_mV"
    BATTERY_AMPERAGE_RAW = "battery.amperage_raw"
    BATTERY_IS_CHARGING = "battery.is_charging"
    BATTERY_EXTERNAL_CONNECTED = "battery.external_connected"
    BATTERY_FULLY_CHARGED = "battery.fully_charged"
    BATTERY_CONDITION = "battery.condition"
    BATTERY_CHARGE_PERCENT = "battery.charge_percent"
    BATTERY_TIME_REMAINING = "battery.time_remaining_minutes"

    DISK_TOTAL = "disk.total_bytes"
    DISK_USED = "disk.used_bytes"
    DISK_AVAILABLE = "disk.available_bytes"
    DISK_SMART_STATUS = "disk.smart_status"

    MEMORY_FREE_PERCENT = "memory.free_percent"
    MEMORY_SWAP_USED_MB = "memory.swap_used_mb"
    PROCESS_TABLE = "process.table"

    HARDWARE_CPU_PHYSICAL = "hardware.cpu_physical_cores"
    HARDWARE_CPU_LOGICAL = "hardware.cpu_logical_cores"
    HARDWARE_CPU_FREQ_MHZ = "hardware.cpu_freq_mhz"
    HARDWARE_FAN_RPM = "hardware.fan_rpm"

    WIFI_POWER = "network.wifi_power"
    WIFI_SSID = "network.wifi_ssid"
    WIFI_RSSI = "network.wifi_rssi_dbm"
    WIFI_CHANNEL = "network.wifi_channel"
    INTERNET_REACHABLE = "network.internet_reachable"
    PING_MS = "network.ping_ms"
    DNS_OK = "network.dns_ok"

    BACKUP_DESTINATION = "backup.destination"
    BACKUP_LAST_SUCCESS = "backup.last_success_timestamp"
    BACKUP_ICLOUD_DRIVE = "backup.icloud_drive"

    FIREWALL_ENABLED = "security.firewall_enabled"
    DISK_ENCRYPTION_ENABLED = "security.disk_encryption_enabled"
    SIP_ENABLED = "security.sip_enabled"
    REMOTE_LOGIN_ENABLED = "security.remote_login_enabled"
    SCREEN_SHARING_ENABLED = "security.screen_sharing_enabled"
    GATEKEEPER_ENABLED = "security.gatekeeper_enabled"

    UPDATES_AVAILABLE = "updates.available_count"
    STATS_APP_INSTALLED = "apps.stats_installed"
    APP_INVENTORY = "apps.inventory"
    LOGIN_ITEMS = "startup.login_items"
    REDUCE_MOTION = "display.reduce_motion"
    REDUCE_TRANSPARENCY = "display.reduce_transparency"


class SensorErrorCode(str, Enum):
    NOT_AVAILABLE = "not_available"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class SensorError:
    code: SensorErrorCode
    name: str
    message: str


SensorResult: TypeAlias = Result[Any, SensorError]


def unavailable(name: SensorName | str, message: str = "not available on this host") -> Err[SensorError]:
    return Err(SensorError(code=SensorErrorCode.NOT_AVAILABLE, name=str(name), message=message))


class Sensors(ABC):
    """Named, fallible queries against the host.

    Subclasses implement ``_read``; a value of ``None`` from ``_read`` is
    reported as not available.
    """

    @abstractmethod
    def _read(self, name: SensorName) -> SensorResult: ...

    def read(self, name: SensorName) -> SensorResult:
        try:
            result = self._read(name)
        except Exception as exc:  # noqa: BLE001
            # Collectors shell out and parse free-form text; any surprise is
            # reported as a failed sample for this one metric.
            logger.debug("sensor %s raised", name.value, exc_info=True)
            return Err(SensorError(code=SensorErrorCode.FAILED, name=name.value, message=str(exc)))
        if isinstance(result, Ok) and result.ok_value is None:
            return unavailable(name)
        return result

    def get(self, name: SensorName) -> Any | None:
        result = self.read(name)
        if isinstance(result, Err):
            logger.debug("sensor %s unavailable: %s", name.value, result.err_value.message)
            return None
        return result.ok_value

    def get_int(self, name: SensorName) -> int | None:
        value = self.get(name)
        if value is None or isinstance(value, bool):
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.debug("sensor %s returned non-integer %r", name.value, value)
            return None

    def get_float(self, name: SensorName) -> float | None:
        value = self.get(name)
        if value is None or isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.debug("sensor %s returned non-numeric %r", name.value, value)
            return None

    def get_bool(self, name: SensorName) -> bool | None:
        value = self.get(name)
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        token = str(value).strip().lower()
        if token in {"yes", "true", "on", "enabled", "1"}:
            return True
        if token in {"no", "false", "off", "disabled", "0"}:
            return False
        return None

    def get_text(self, name: SensorName) -> str | None:
        value = self.get(name)
        if value is None:
            return None
        return str(value).strip()

    def get_list(self, name: SensorName) -> list[Any] | None:
        value = self.get(name)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return list(value)
        return [value]
