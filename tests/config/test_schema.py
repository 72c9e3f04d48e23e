from __future__ import annotations

from checkup.config.defaults import DEFAULT_SCAN_ROOTS, default_config
from checkup.config.schema import AppConfig
from checkup.models.catalog import CategorySpec
from checkup.models.enums import ActionKind, ProbeKind


class TestToDict:
    def test_keys_present(self) -> None:
        d = AppConfig().to_dict()
        assert set(d) == {
            "minCategoryMb",
            "duplicateMinMb",
            "duplicateScaleGuard",
            "largeFileMb",
            "largeFileTopCount",
            "staleAppMonths",
            "staleAppLimit",
            "startupItemLimit",
            "processTopCount",
            "commandTimeout",
            "scanRoots",
            "applicationsDir",
            "reportDir",
            "extraCategories",
        }

    def test_defaults(self) -> None:
        cfg = default_config()
        assert cfg.scan_roots == list(DEFAULT_SCAN_ROOTS)
        assert cfg.duplicate_scale_guard == 5000
        assert cfg.stale_app_months == 6
        assert cfg.min_category_bytes == 1024 * 1024


class TestFromDict:
    def test_missing_keys_fall_back(self) -> None:
        cfg = AppConfig.from_dict({"largeFileMb": 250}, default_config())
        assert cfg.large_file_mb == 250
        assert cfg.stale_app_months == 6
        assert cfg.scan_roots == list(DEFAULT_SCAN_ROOTS)

    def test_values_are_clamped(self) -> None:
        cfg = AppConfig.from_dict({"duplicateScaleGuard": 0, "staleAppMonths": -4}, default_config())
        assert cfg.duplicate_scale_guard == 1
        assert cfg.stale_app_months == 1

    def test_round_trip_with_extra_category(self) -> None:
        source = default_config()
        source.extra_categories.append(
            CategorySpec("renders", "Renders", "Old renders.", ActionKind.DELETE_AGED, paths=("~/Renders",), age_days=14)
        )
        restored = AppConfig.from_dict(source.to_dict(), default_config())
        [spec] = restored.extra_categories
        assert (spec.key, spec.action, spec.probe, spec.paths, spec.age_days) == (
            "renders",
            ActionKind.DELETE_AGED,
            ProbeKind.DIRECTORY,
            ("~/Renders",),
            14,
        )

    def test_extra_category_minimal_payload(self) -> None:
        cfg = AppConfig.from_dict({"extraCategories": [{"name": "Game Caches", "paths": ["~/g"]}]}, default_config())
        [spec] = cfg.extra_categories
        assert spec.key == "game_caches"
        assert spec.action is ActionKind.CLEAR_CONTENTS

