from __future__ import annotations

from checkup.checks.backup import check_backup
from checkup.checks.battery import check_battery
from checkup.checks.hardware import check_hardware
from checkup.checks.load import check_load
from checkup.checks.maintenance import check_maintenance
from checkup.checks.network import check_network
from checkup.checks.security import check_security
from checkup.checks.storage import check_storage
from checkup.checks.system import check_system
from checkup.checks.updates import check_updates

__all__ = [
    "check_backup",
    "check_battery",
    "check_hardware",
    "check_load",
    "check_maintenance",
    "check_network",
    "check_security",
    "check_storage",
    "check_system",
    "check_updates",
]
