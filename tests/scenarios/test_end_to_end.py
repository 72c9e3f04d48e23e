from __future__ import annotations

import json
import logging
import time
from io import StringIO
from pathlib import Path
from typing import Any

from typing_extensions import override

import pytest
from rich.console import Console
from rich.status import Status

from checkup.cli import main
from checkup.config.schema import AppConfig
from checkup.models.enums import Severity
from checkup.sensors.static import StaticSensors
from checkup.services.units import SECONDS_PER_MONTH
from checkup.session import SELECTION_HINT, CheckupSession, Stage
from checkup.ui.prompts import ScriptedPrompter
from tests.factories import NOW, make_file, make_sensors, note_texts
from tests.fakes import FakeRunner, TrashFileSystem

_MB = 1024 * 1024


class _Machine:
    """A fake home directory, applications folder and report folder under tmp_path."""

    def __init__(self, tmp_path: Path) -> None:
        self.home = tmp_path / "home"
        self.home.mkdir()
        self.apps = tmp_path / "Applications"
        self.reports = tmp_path / "reports"
        self.config = AppConfig(
            duplicate_min_mb=0,
            scan_roots=[str(self.home / "Documents")],
            applications_dir=str(self.apps),
            report_dir=str(self.reports),
        )
        self.fs = TrashFileSystem(tmp_path / "trash", home=self.home)
        self.out = StringIO()
        self.console = Console(file=self.out, width=200)

    def session(self, sensors: StaticSensors, answers: list[str], runner: FakeRunner | None = None) -> CheckupSession:
        return CheckupSession(
            sensors,
            self.config,
            ScriptedPrompter(answers, self.console),
            self.console,
            fs=self.fs,
            runner=runner or FakeRunner(),
            clock=lambda: NOW,
        )


@pytest.fixture
def machine(tmp_path: Path) -> _Machine:
    return _Machine(tmp_path)


class TestFullRun:
    def test_healthy_mac(self, machine: _Machine) -> None:
        session = machine.session(make_sensors(), [])
        summary = session.run()

        assert summary.healthy
        assert summary.recommendations == ()
        assert session.failed == []
        assert session.completed == list(Stage)
        assert "Your Mac is in great shape!" in machine.out.getvalue()
        assert session.prompter.asked == [  # type: ignore[attr-defined]
            "Flush the DNS cache? (asks for your password)",
            f"Save a report to {machine.reports}?",
        ]

    def test_worn_battery(self, machine: _Machine) -> None:
        sensors = make_sensors(battery_max_capacity=2_750, battery_design_capacity=5_000, battery_cycle_count=850)
        summary = machine.session(sensors, []).run()

        assert (summary.problems, summary.warnings) == (1, 1)
        assert [r.severity for r in summary.recommendations] == [Severity.CRITICAL, Severity.WARNING]
        assert summary.recommendations[0].text == "Battery is significantly degraded at 55%. Replacement recommended."

    def test_sixty_percent_disk_is_not_flagged(self, machine: _Machine) -> None:
        gb = 1024**3
        session = machine.session(make_sensors(disk_used=600 * gb, disk_available=400 * gb), [])
        session.run()
        storage = next(s for s in session.sections if s.title == "Storage Analysis")
        assert all(f.severity is Severity.GOOD for f in storage.findings)
        assert session.aggregator.summary().problems == 0

    def test_failing_stage_does_not_stop_the_run(self, machine: _Machine, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(*_args: Any, **_kwargs: Any) -> None:
            raise RuntimeError("disk vanished")

        monkeypatch.setattr("checkup.session.find_large_files", boom)
        session = machine.session(make_sensors(), [])
        summary = session.run()

        assert session.failed == [Stage.SCAN_LARGE_FILES]
        assert Stage.SUMMARY in session.completed
        failed = next(s for s in session.sections if s.title == "Scan Large Files")
        assert note_texts(failed) == ["Could not complete this step: disk vanished"]
        assert summary.problems == 0


class TestInteractiveStages:
    def test_remove_duplicate_copies(self, machine: _Machine) -> None:
        docs = machine.home / "Documents"
        keep = make_file(docs / "a.bin", 4_096, fill=b"A")
        extra = make_file(docs / "b.bin", 4_096, fill=b"A")
        session = machine.session(make_sensors(), ["1", "y"])

        summary = session.run()

        assert keep.exists()
        assert not extra.exists()
        assert summary.freed_bytes == 4_096
        assert summary.warnings == 0
        assert any(r.text.startswith("Duplicate files waste 4.0 KB") for r in summary.recommendations)
        assert session.prompter.asked[:2] == [  # type: ignore[attr-defined]
            f"Remove extra copies from which sets? ({SELECTION_HINT})",
            "Move 1 duplicate copies to the Trash?",
        ]

    def test_declined_duplicates_stay(self, machine: _Machine) -> None:
        docs = machine.home / "Documents"
        make_file(docs / "a.bin", 100)
        extra = make_file(docs / "b.bin", 100)
        summary = machine.session(make_sensors(), ["all", "n"]).run()
        assert extra.exists()
        assert summary.freed_bytes == 0

    def test_scale_prompt_pauses_the_spinner(self, machine: _Machine, monkeypatch: pytest.MonkeyPatch) -> None:
        events: list[str] = []
        for name in ("start", "stop"):
            original = getattr(Status, name)

            def record(status: Status, _name: str = name, _original: Any = original) -> None:
                events.append(_name)
                _original(status)

            monkeypatch.setattr(Status, name, record)

        class _Recording(ScriptedPrompter):
            @override
            def confirm(self, text: str) -> bool:
                events.append(text)
                return super().confirm(text)

        docs = machine.home / "Documents"
        make_file(docs / "a.bin", 100)
        extra = make_file(docs / "b.bin", 100)
        machine.config.duplicate_scale_guard = 1
        session = CheckupSession(
            make_sensors(),
            machine.config,
            _Recording(["y", "skip"], machine.console),
            machine.console,
            fs=machine.fs,
            runner=FakeRunner(),
            clock=lambda: NOW,
        )

        session.run()

        [at] = [i for i, event in enumerate(events) if event.endswith("can take a while. Continue?")]
        assert events[at - 1] == "stop"
        assert events[at + 1] == "start"
        assert session.prompter.asked[1].startswith("Remove extra copies from which sets?")  # type: ignore[attr-defined]
        assert extra.exists()

    def test_declined_scale_prompt_skips_only_duplicates(self, machine: _Machine) -> None:
        docs = machine.home / "Documents"
        make_file(docs / "a.bin", 100)
        make_file(docs / "b.bin", 100)
        machine.config.duplicate_scale_guard = 1
        session = machine.session(make_sensors(), ["n"])

        session.run()

        assert Stage.SCAN_DUPLICATES in session.completed
        assert session.failed == []
        assert not any(q.startswith("Remove extra copies") for q in session.prompter.asked)  # type: ignore[attr-defined]

    def test_rejected_choice_is_reported_once(self, machine: _Machine, caplog: pytest.LogCaptureFixture) -> None:
        make_file(machine.home / "Library/Caches/com.example.app/blob", 2 * _MB)
        with caplog.at_level(logging.WARNING):
            summary = machine.session(make_sensors(), ["1,9"]).run()
        assert summary.freed_bytes == 2 * _MB
        assert "Ignored: 9" in machine.out.getvalue()
        assert not any("selection" in record.getMessage() for record in caplog.records)

    def test_old_downloads_are_listed_before_the_confirmation(self, machine: _Machine) -> None:
        old = make_file(machine.home / "Downloads/installer.dmg", 2 * _MB, mtime=NOW - 60 * 86_400)
        make_file(machine.home / "Downloads/fresh.pdf", 10, mtime=NOW)
        session = machine.session(make_sensors(), ["1", "y"])

        summary = session.run()

        out = machine.out.getvalue()
        assert "trash ~/Downloads/installer.dmg" in out
        assert "fresh.pdf" not in out
        assert out.index("trash ~/Downloads/installer.dmg") < out.index("Move 1 item from Old Downloads")
        assert not old.exists()
        assert summary.freed_bytes == 2 * _MB

    def test_clean_app_caches(self, machine: _Machine) -> None:
        caches = machine.home / "Library/Caches"
        make_file(caches / "com.example.app/blob", 2 * _MB)
        session = machine.session(make_sensors(), ["1"])

        summary = session.run()

        assert summary.reclaimable_bytes == 2 * _MB
        assert summary.freed_bytes == 2 * _MB
        assert caches.is_dir()
        assert list(caches.iterdir()) == []

    def test_trash_stale_app(self, machine: _Machine) -> None:
        bundle = make_file(machine.apps / "Old.app/Contents/MacOS/Old", 1_000).parents[2]
        inventory = [{"name": "Old", "path": str(bundle), "last_used_ts": NOW - 12 * SECONDS_PER_MONTH}]
        session = machine.session(make_sensors(app_inventory=inventory), ["1", "y"])

        summary = session.run()

        assert not bundle.exists()
        assert summary.freed_bytes == 1_000
        assert session.prompter.asked[1] == "Move Old to the Trash?"  # type: ignore[attr-defined]

    def test_too_many_startup_items(self, machine: _Machine) -> None:
        names = [f"Helper {i}" for i in range(10)]
        summary = machine.session(make_sensors(login_items=names), ["skip"]).run()
        assert summary.warnings == 1
        assert summary.recommendations[0].text == (
            "You have 10 startup items. Reducing these will make your Mac boot faster."
        )

    def test_dns_flush_runs_both_commands(self, machine: _Machine) -> None:
        runner = FakeRunner(
            {
                ("sudo", "dscacheutil", "-flushcache"): "",
                ("sudo", "killall", "-HUP", "mDNSResponder"): "",
            }
        )
        machine.session(make_sensors(), ["y"], runner).run()
        assert ("sudo", "killall", "-HUP", "mDNSResponder") in runner.calls
        assert "DNS cache flushed" in machine.out.getvalue()

    def test_offers_stats_when_homebrew_is_present(self, machine: _Machine) -> None:
        runner = FakeRunner({("brew", "install", "--cask", "stats"): ""}, tools=["brew"])
        session = machine.session(make_sensors(stats_app_installed=False), ["n", "y"], runner)
        session.run()
        assert ("brew", "install", "--cask", "stats") in runner.calls

    def test_save_report(self, machine: _Machine) -> None:
        sensors = make_sensors(battery_max_capacity=2_750)
        machine.session(sensors, ["n", "y"]).run()

        [report] = list(machine.reports.glob("Mac-Health-Report-*.txt"))
        text = report.read_text(encoding="utf-8")
        assert "PROBLEMS: 1" in text
        assert "--- Battery Health ---" in text
        assert "Battery is significantly degraded at 55%. Replacement recommended." in text


class TestCli:
    @pytest.fixture
    def home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
        home = tmp_path / "home"
        home.mkdir()
        monkeypatch.setenv("HOME", str(home))
        return home

    def _write(self, path: Path, payload: dict[str, Any]) -> str:
        path.write_text(json.dumps(payload), encoding="utf-8")
        return str(path)

    def _args(self, home: Path, **overrides: Any) -> list[str]:
        config = self._write(
            home / "config.json",
            {"scanRoots": [], "applicationsDir": str(home / "Applications"), "reportDir": str(home / "reports")},
        )
        sensors = make_sensors(backup_last_success=time.time(), **overrides).to_dict()
        return ["--config", config, "--sensors-json", self._write(home / "sensors.json", sensors), "--answers", ""]

    def test_healthy_run_exits_zero(self, home: Path) -> None:
        assert main([*self._args(home), "--strict", "--no-color"]) == 0

    def test_strict_exits_one_on_problems(self, home: Path) -> None:
        args = self._args(home, battery_max_capacity=2_000)
        assert main([*args, "--strict"]) == 1
        assert main(args) == 0

    def test_unreadable_sensor_snapshot(self, home: Path) -> None:
        assert main(["--sensors-json", str(home / "missing.json")]) == 2

    def test_bad_config(self, home: Path) -> None:
        bad = home / "config.json"
        bad.write_text("[1, 2]", encoding="utf-8")
        assert main(["--config", str(bad)]) == 2

    def test_sample_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        assert main(["--sample-config"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["staleAppMonths"] == 6
        assert payload["scanRoots"] == ["~/Documents", "~/Downloads", "~/Desktop"]
