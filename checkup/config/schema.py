from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from checkup.models.catalog import CategorySpec

# (json_key, attr_name, minimum)
_INT_FIELDS: tuple[tuple[str, str, int], ...] = (
    ("minCategoryMb", "min_category_mb", 0),
    ("duplicateMinMb", "duplicate_min_mb", 0),
    ("duplicateScaleGuard", "duplicate_scale_guard", 1),
    ("largeFileMb", "large_file_mb", 1),
    ("largeFileTopCount", "large_file_top_count", 1),
    ("staleAppMonths", "stale_app_months", 1),
    ("staleAppLimit", "stale_app_limit", 1),
    ("startupItemLimit", "startup_item_limit", 0),
    ("processTopCount", "process_top_count", 1),
    ("commandTimeout", "command_timeout", 1),
)

_MB = 1024 * 1024


def _get_int(data: dict[str, Any], json_key: str, default: int, minimum: int) -> int:
    return max(minimum, int(data.get(json_key, default)))


@dataclass(slots=True)
class AppConfig:
    min_category_mb: int = 1
    duplicate_min_mb: int = 1
    duplicate_scale_guard: int = 5000
    large_file_mb: int = 500
    large_file_top_count: int = 10
    stale_app_months: int = 6
    stale_app_limit: int = 15
    startup_item_limit: int = 8
    process_top_count: int = 8
    command_timeout: int = 10
    scan_roots: list[str] = field(default_factory=list)
    applications_dir: str = "/Applications"
    report_dir: str = "~/Desktop"
    extra_categories: list[CategorySpec] = field(default_factory=list)

    @property
    def min_category_bytes(self) -> int:
        return self.min_category_mb * _MB

    @property
    def duplicate_min_bytes(self) -> int:
        return self.duplicate_min_mb * _MB

    @property
    def large_file_bytes(self) -> int:
        return self.large_file_mb * _MB

    def to_dict(self) -> dict[str, Any]:
        return {
            "minCategoryMb": self.min_category_mb,
            "duplicateMinMb": self.duplicate_min_mb,
            "duplicateScaleGuard": self.duplicate_scale_guard,
            "largeFileMb": self.large_file_mb,
            "largeFileTopCount": self.large_file_top_count,
            "staleAppMonths": self.stale_app_months,
            "staleAppLimit": self.stale_app_limit,
            "startupItemLimit": self.startup_item_limit,
            "processTopCount": self.process_top_count,
            "commandTimeout": self.command_timeout,
            "scanRoots": list(self.scan_roots),
            "applicationsDir": self.applications_dir,
            "reportDir": self.report_dir,
            "extraCategories": [spec.to_dict() for spec in self.extra_categories],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], defaults: AppConfig) -> AppConfig:
        roots_raw = data.get("scanRoots")
        if roots_raw is not None:
            scan_roots = [str(p) for p in roots_raw]
        else:
            scan_roots = list(defaults.scan_roots)

        extras_raw = data.get("extraCategories")
        if extras_raw is not None:
            extra_categories = [CategorySpec.from_dict(x) for x in extras_raw]
        else:
            extra_categories = list(defaults.extra_categories)

        int_kwargs: dict[str, int] = {}
        for json_key, attr, minimum in _INT_FIELDS:
            int_kwargs[attr] = _get_int(data, json_key, getattr(defaults, attr), minimum)

        return cls(
            scan_roots=scan_roots,
            applications_dir=str(data.get("applicationsDir", defaults.applications_dir)),
            report_dir=str(data.get("reportDir", defaults.report_dir)),
            extra_categories=extra_categories,
            **int_kwargs,
        )
