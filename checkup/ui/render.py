from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from checkup.models.analysis import DuplicateGroup, LargeFile, RemovalResult, StaleApp, StartupItem
from checkup.models.catalog import ActionResult, Category
from checkup.models.enums import ActionKind, ActionStatus, Severity
from checkup.models.finding import Entry, Finding, Heading, Note, RunSummary, Section
from checkup.services.formatting import format_bytes, relative_path

SEVERITY_STYLE: dict[Severity, str] = {
    Severity.GOOD: "green",
    Severity.WARNING: "yellow",
    Severity.CRITICAL: "bold red",
}

LARGE_APP_BYTES = 100 * 1024 * 1024

_STATUS_STYLE: dict[ActionStatus, str] = {
    ActionStatus.DONE: "green",
    ActionStatus.MISSING: "dim",
    ActionStatus.DECLINED: "dim",
    ActionStatus.FAILED: "red",
}


def entry_markup(entry: Entry) -> str:
    if isinstance(entry, Heading):
        return f"\n  [bold]{escape(entry.text)}[/bold]"
    if isinstance(entry, Note):
        style = SEVERITY_STYLE[entry.tone] if entry.tone is not None else "dim"
        return f"    [{style}]→ {escape(entry.text)}[/{style}]"
    return finding_markup(entry)


def finding_markup(finding: Finding) -> str:
    style = SEVERITY_STYLE[finding.severity]
    return (
        f"  [{style}]{finding.severity.glyph}[/{style}] "
        f"[bold]{escape(finding.subject)}:[/bold] [{style}]{escape(finding.message)}[/{style}]"
    )


def render_banner(console: Console, machine: str, when: str) -> None:
    body = "[bold]Mac Health Checkup[/bold]\n" + escape(when)
    if machine:
        body += "\n" + escape(machine)
    console.print(Panel(body, border_style="blue"))


def render_section(console: Console, section: Section) -> None:
    console.rule(f"[bold cyan]{escape(section.title)}[/bold cyan]", align="left")
    for entry in section.entries:
        console.print(entry_markup(entry))


def _describe_size(category: Category) -> str:
    if category.action is ActionKind.SYSTEM_DELEGATE:
        return f"{category.item_count} snapshot(s)"
    return format_bytes(category.size_bytes)


def category_table(title: str, categories: Sequence[Category]) -> Table:
    table = Table(title=title, header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("Category")
    table.add_column("Size", justify="right")
    table.add_column("What it is", style="dim")
    for number, category in enumerate(categories, start=1):
        table.add_row(str(number), escape(category.name), _describe_size(category), escape(category.description))
    return table


def large_files_table(files: Sequence[LargeFile], home: str) -> Table:
    table = Table(title="Largest Files", header_style="bold yellow")
    table.add_column("Path")
    table.add_column("Size", justify="right")
    for item in files:
        table.add_row(escape(relative_path(item.path, home)), format_bytes(item.size_bytes))
    return table


def duplicate_table(groups: Sequence[DuplicateGroup], home: str) -> Table:
    table = Table(title="Duplicate Files", header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("Keep")
    table.add_column("Copies", justify="right")
    table.add_column("Wasted", justify="right")
    for number, group in enumerate(groups, start=1):
        table.add_row(
            str(number),
            escape(relative_path(group.keep, home)),
            str(len(group.candidates)),
            format_bytes(group.wasted_bytes),
        )
    return table


def stale_apps_table(apps: Sequence[StaleApp]) -> Table:
    table = Table(title="Apps You Haven't Used", header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("App")
    table.add_column("Size", justify="right")
    table.add_column("Last used", justify="right")
    for number, app in enumerate(apps, start=1):
        size = format_bytes(app.size_bytes)
        if app.size_bytes > LARGE_APP_BYTES:
            size = f"[yellow]{size}[/yellow]"
        table.add_row(str(number), escape(app.name), size, f"{app.months_unused} months ago")
    return table


def startup_table(items: Sequence[StartupItem]) -> Table:
    table = Table(title="Startup Items", header_style="bold yellow")
    table.add_column("#", justify="right")
    table.add_column("Item")
    table.add_column("Type")
    for number, item in enumerate(items, start=1):
        table.add_row(str(number), escape(item.name), item.kind.label)
    return table


def render_action_results(console: Console, results: Sequence[ActionResult]) -> int:
    freed = 0
    for result in results:
        style = _STATUS_STYLE[result.status]
        detail = result.message or result.status.value
        if result.success:
            freed += result.bytes_freed
            detail = f"{detail} ({format_bytes(result.bytes_freed)})" if result.bytes_freed else detail
        console.print(f"  [{style}]{escape(result.name)}: {escape(detail)}[/{style}]")
    if freed:
        console.print(f"  [bold green]Freed {format_bytes(freed)}[/bold green]")
    return freed


def render_removals(console: Console, results: Sequence[RemovalResult], home: str = "") -> int:
    affected = 0
    for result in results:
        style = "green" if result.ok else "red"
        target = relative_path(result.target, home) if home else result.target
        console.print(f"  [{style}]{escape(target)}: {escape(result.message)}[/{style}]")
        if result.ok:
            affected += result.bytes_affected
    if affected:
        console.print(f"  [bold green]Freed {format_bytes(affected)}[/bold green]")
    return affected


def render_summary(console: Console, summary: RunSummary) -> None:
    counts = Table.grid(padding=(0, 2))
    counts.add_column()
    counts.add_column(justify="right")
    counts.add_row("[bold red]Problems[/bold red]", str(summary.problems))
    counts.add_row("[yellow]Warnings[/yellow]", str(summary.warnings))
    if summary.freed_bytes:
        counts.add_row("[green]Space freed[/green]", format_bytes(summary.freed_bytes))
    border = "green" if summary.healthy else ("red" if summary.problems else "yellow")
    console.print(Panel(counts, title="Summary", border_style=border))

    if summary.healthy:
        console.print("[bold green]Your Mac is in great shape![/bold green]")
    if not summary.recommendations:
        return
    console.print("[bold]Recommendations[/bold]")
    for number, rec in enumerate(summary.recommendations, start=1):
        style = SEVERITY_STYLE[rec.severity]
        console.print(f"  [{style}]{number}. {escape(rec.text)}[/{style}]")
