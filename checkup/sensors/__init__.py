from __future__ import annotations

from checkup.sensors.base import SensorError, SensorErrorCode, SensorName, SensorResult, Sensors
from checkup.sensors.macos import MacSensors, default_sensors
from checkup.sensors.static import StaticSensors

__all__ = [
    "MacSensors",
    "SensorError",
    "SensorErrorCode",
    "SensorName",
    "SensorResult",
    "Sensors",
    "StaticSensors",
    "default_sensors",
]
