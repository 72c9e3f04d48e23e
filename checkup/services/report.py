from __future__ import annotations

import os
from collections.abc import Sequence
from datetime import datetime

from result import Err, Ok, Result

from checkup.models.finding import Finding, Heading, Note, RunSummary, Section
from checkup.services.fs import DEFAULT_FS, FileSystem

_RULE = "=" * 60
_THIN_RULE = "-" * 60


def report_filename(moment: datetime) -> str:
    return f"Mac-Health-Report-{moment:%Y-%m-%d-%H%M}.txt"


def _entry_line(entry: Finding | Note | Heading) -> str:
    if isinstance(entry, Heading):
        return f"  [{entry.text}]"
    if isinstance(entry, Note):
        return f"    -> {entry.text}"
    return f"  {entry.severity.glyph}  {entry.subject}: {entry.message}"


def render_report(
    summary: RunSummary,
    sections: Sequence[Section],
    moment: datetime,
    machine: str = "",
) -> str:
    """Plain-text report: header, counts, recommendations, then a per-section snapshot."""
    lines = [
        _RULE,
        "  MAC HEALTH CHECKUP REPORT",
        f"  {moment:%B %d, %Y at %I:%M %p}",
    ]
    if machine:
        lines.append(f"  {machine}")
    lines.extend([_RULE, "", f"PROBLEMS: {summary.problems}", f"WARNINGS: {summary.warnings}", ""])

    if summary.recommendations:
        lines.append("RECOMMENDATIONS:")
        lines.extend(f"  • {rec.text}" for rec in summary.recommendations)
        lines.append("")

    lines.extend([_THIN_RULE, "QUICK DATA SNAPSHOT:", ""])
    for section in sections:
        if not section.entries:
            continue
        lines.append(f"--- {section.title} ---")
        lines.extend(_entry_line(entry) for entry in section.entries)
        lines.append("")

    lines.extend([_RULE, "  Generated by mac-checkup", _RULE, ""])
    return "\n".join(lines)


def write_report(
    directory: str,
    summary: RunSummary,
    sections: Sequence[Section],
    moment: datetime | None = None,
    machine: str = "",
    fs: FileSystem = DEFAULT_FS,
) -> Result[str, str]:
    when = moment or datetime.now()
    target = os.path.join(fs.expanduser(directory), report_filename(when))
    try:
        fs.write_text(target, render_report(summary, sections, when, machine))
    except OSError as exc:
        return Err(f"Could not write report to {target}: {exc}.")
    return Ok(target)
