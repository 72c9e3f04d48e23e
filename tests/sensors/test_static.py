from __future__ import annotations

import json
from pathlib import Path

from result import Err

from checkup.sensors.base import SensorErrorCode, SensorName, SensorResult, Sensors
from checkup.sensors.static import StaticSensors


class _Exploding(Sensors):
    def _read(self, name: SensorName) -> SensorResult:
        raise RuntimeError("ioreg vanished")


class TestStaticSensors:
    def test_accepts_enum_or_dotted_keys(self) -> None:
        sensors = StaticSensors({SensorName.PING_MS: 12.5, "battery.cycle_count": "321"})
        assert sensors.get_float(SensorName.PING_MS) == 12.5
        assert sensors.get_int(SensorName.BATTERY_CYCLE_COUNT) == 321

    def test_missing_is_not_available(self) -> None:
        result = StaticSensors().read(SensorName.DISK_TOTAL)
        assert isinstance(result, Err)
        assert result.unwrap_err().code is SensorErrorCode.NOT_AVAILABLE

    def test_none_value_is_not_available(self) -> None:
        assert isinstance(StaticSensors({SensorName.DISK_TOTAL: None}).read(SensorName.DISK_TOTAL), Err)

    def test_coercions(self) -> None:
        sensors = StaticSensors(
            {
                SensorName.FIREWALL_ENABLED: "enabled",
                SensorName.SIP_ENABLED: "maybe",
                SensorName.WIFI_RSSI: True,
                SensorName.DISK_SMART_STATUS: "  Verified ",
                SensorName.LOGIN_ITEMS: "Dropbox",
            }
        )
        assert sensors.get_bool(SensorName.FIREWALL_ENABLED) is True
        assert sensors.get_bool(SensorName.SIP_ENABLED) is None
        assert sensors.get_int(SensorName.WIFI_RSSI) is None
        assert sensors.get_text(SensorName.DISK_SMART_STATUS) == "Verified"
        assert sensors.get_list(SensorName.LOGIN_ITEMS) == ["Dropbox"]

    def test_from_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "snapshot.json"
        path.write_text(json.dumps({"network.ping_ms": 30}), encoding="utf-8")
        sensors = StaticSensors.from_json_file(path).unwrap()
        assert sensors.to_dict() == {"network.ping_ms": 30}

    def test_from_json_file_errors(self, tmp_path: Path) -> None:
        assert isinstance(StaticSensors.from_json_file(tmp_path / "missing.json"), Err)
        bad = tmp_path / "list.json"
        bad.write_text("[]", encoding="utf-8")
        assert "must be a JSON object" in StaticSensors.from_json_file(bad).unwrap_err()


def test_collector_exceptions_become_failed_readings() -> None:
    sensors = _Exploding()
    result = sensors.read(SensorName.BATTERY_MAX_CAPACITY)
    assert isinstance(result, Err)
    assert result.unwrap_err().code is SensorErrorCode.FAILED
    assert sensors.get(SensorName.BATTERY_MAX_CAPACITY) is None
