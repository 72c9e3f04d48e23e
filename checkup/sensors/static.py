from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from typing_extensions import override

from result import Err, Ok, Result

from checkup.sensors.base import SensorName, SensorResult, Sensors, unavailable


class StaticSensors(Sensors):
    """Sensors answered from a fixed mapping (captured snapshot or test data).

    Keys may be ``SensorName`` members or their dotted string values.
    """

    def __init__(self, values: dict[SensorName | str, Any] | None = None) -> None:
        self._values: dict[str, Any] = {}
        for key, value in (values or {}).items():
            self._values[key.value if isinstance(key, SensorName) else str(key)] = value

    @override
    def _read(self, name: SensorName) -> SensorResult:
        if name.value not in self._values:
            return unavailable(name, "no sample captured")
        return Ok(self._values[name.value])

    def to_dict(self) -> dict[str, Any]:
        return dict(self._values)

    @classmethod
    def from_json_file(cls, path: str | Path) -> Result[StaticSensors, str]:
        resolved = Path(path).expanduser()
        try:
            payload = json.loads(resolved.read_text(encoding="utf-8"))
        except Exception as exc:  # noqa: BLE001
            return Err(f"Failed reading sensor snapshot at {resolved}: {exc}.")
        if not isinstance(payload, dict):
            return Err(f"Sensor snapshot at {resolved} must be a JSON object.")
        return Ok(cls(payload))
