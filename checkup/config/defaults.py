from __future__ import annotations

from checkup.config.schema import AppConfig

DEFAULT_SCAN_ROOTS: tuple[str, ...] = ("~/Documents", "~/Downloads", "~/Desktop")


def default_config() -> AppConfig:
    return AppConfig(scan_roots=list(DEFAULT_SCAN_ROOTS))
