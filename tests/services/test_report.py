from __future__ import annotations

from datetime import datetime
from pathlib import Path

from result import Err, Ok

from checkup.models.enums import Severity
from checkup.models.finding import Finding, Recommendation, RunSummary, Section
from checkup.services.fs import FileSystem
from checkup.services.report import render_report, report_filename, write_report

_MOMENT = datetime(2025, 3, 7, 9, 5)


def _summary() -> RunSummary:
    return RunSummary(
        problems=1,
        warnings=1,
        recommendations=(
            Recommendation("Replace the battery.", Severity.CRITICAL),
            Recommendation("Free some disk.", Severity.WARNING),
        ),
        reclaimable_bytes=0,
        freed_bytes=0,
    )


def _sections() -> list[Section]:
    battery = Section("Battery Health")
    battery.heading("Power")
    battery.add(Finding("Battery Health", Severity.CRITICAL, "Battery health: 55% (Degraded)"))
    battery.note("Charge level: 80%")
    return [battery, Section("Empty")]


def test_report_filename() -> None:
    assert report_filename(_MOMENT) == "Mac-Health-Report-2025-03-07-0905.txt"


def test_render_report_layout() -> None:
    text = render_report(_summary(), _sections(), _MOMENT, "MacBook Pro (Apple Silicon)")
    assert "MacBook Pro (Apple Silicon)" in text
    assert "PROBLEMS: 1" in text
    assert "WARNINGS: 1" in text
    assert "  • Replace the battery." in text
    assert "--- Battery Health ---" in text
    assert "  ✗  Battery Health: Battery health: 55% (Degraded)" in text
    assert "    -> Charge level: 80%" in text
    assert "--- Empty ---" not in text
    assert text.index("RECOMMENDATIONS:") < text.index("QUICK DATA SNAPSHOT:")


class TestWriteReport:
    def test_writes_into_directory(self, tmp_path: Path) -> None:
        result = write_report(str(tmp_path / "out"), _summary(), _sections(), _MOMENT, fs=FileSystem())
        assert isinstance(result, Ok)
        written = Path(result.unwrap())
        assert written.name == "Mac-Health-Report-2025-03-07-0905.txt"
        assert "PROBLEMS: 1" in written.read_text(encoding="utf-8")

    def test_unwritable_location(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        result = write_report(str(blocker), _summary(), [], _MOMENT, fs=FileSystem())
        assert isinstance(result, Err)
        assert "Could not write report" in result.unwrap_err()
