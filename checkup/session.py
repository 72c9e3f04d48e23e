"""The checkup run: a fixed sequence of stages feeding one FindingAggregator.

Scan stages are read-only; they build a Section, render it and fold its
findings into the aggregator.  Interactive stages list what can be cleaned,
ask for a selection and act on it.  A stage that blows up is reported as a
note and the run moves on, so the summary is always reached.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import Enum
from typing import Any

from result import Err
from rich.console import Console
from rich.markup import escape
from rich.status import Status

from checkup.checks import (
    check_backup,
    check_battery,
    check_hardware,
    check_load,
    check_maintenance,
    check_network,
    check_security,
    check_storage,
    check_system,
    check_updates,
)
from checkup.checks.system import machine_line
from checkup.config.schema import AppConfig
from checkup.models.analysis import AppEntry, DuplicateGroup
from checkup.models.catalog import Category
from checkup.models.enums import Severity
from checkup.models.finding import Finding, RunSummary, Section
from checkup.sensors.base import SensorName, Sensors
from checkup.services.aggregator import FindingAggregator
from checkup.services.catalog import Catalog, default_category_specs, privacy_category_specs
from checkup.services.commands import DEFAULT_RUNNER, CommandRunner
from checkup.services.duplicates import by_wasted_space, find_duplicates, trash_duplicates
from checkup.services.formatting import format_bytes, relative_path
from checkup.services.fs import DEFAULT_FS, FileSystem
from checkup.services.large_files import find_large_files
from checkup.services.report import write_report
from checkup.services.selection import parse_selection
from checkup.services.stale_apps import find_stale_apps, trash_apps
from checkup.services.startup import disable_items, list_startup_items
from checkup.ui import render
from checkup.ui.prompts import Prompter

logger = logging.getLogger(__name__)

_GB = 1024**3
SELECTION_HINT = "numbers like 1,3 / all / skip"
DNS_FLUSH_COMMANDS: tuple[tuple[str, ...], ...] = (
    ("sudo", "dscacheutil", "-flushcache"),
    ("sudo", "killall", "-HUP", "mDNSResponder"),
)
STATS_INSTALL = ("brew", "install", "--cask", "stats")


class Stage(str, Enum):
    INIT = "init"
    SCAN_HARDWARE = "scan-hardware"
    SCAN_BATTERY = "scan-battery"
    SCAN_LOAD = "scan-load"
    SCAN_STORAGE = "scan-storage"
    SCAN_LARGE_FILES = "scan-large-files"
    SCAN_DUPLICATES = "scan-duplicates"
    SCAN_STALE_APPS = "scan-stale-apps"
    SCAN_STARTUP = "scan-startup"
    INTERACTIVE_CLEANUP = "interactive-cleanup"
    INTERACTIVE_PRIVACY = "interactive-privacy"
    MAINTENANCE = "maintenance"
    SCAN_HARDWARE_DETAIL = "scan-hardware-detail"
    SCAN_UPDATES = "scan-updates"
    SCAN_NETWORK = "scan-network"
    SCAN_BACKUP = "scan-backup"
    SCAN_SECURITY = "scan-security"
    SAVE_REPORT = "save-report"
    SUMMARY = "summary"

    @property
    def title(self) -> str:
        return self.value.replace("-", " ").title()


class CheckupSession:
    def __init__(
        self,
        sensors: Sensors,
        config: AppConfig,
        prompter: Prompter,
        console: Console,
        fs: FileSystem = DEFAULT_FS,
        runner: CommandRunner = DEFAULT_RUNNER,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.sensors = sensors
        self.config = config
        self.prompter = prompter
        self.console = console
        self.fs = fs
        self.runner = runner
        self.clock = clock
        self.aggregator = FindingAggregator()
        self.sections: list[Section] = []
        self.completed: list[Stage] = []
        self.failed: list[Stage] = []
        self.catalog = Catalog(default_category_specs(config), fs, runner, clock)
        self.privacy = Catalog(privacy_category_specs(), fs, runner, clock)
        self.home = fs.expanduser("~")
        self.machine = ""
        self._handlers: dict[Stage, Callable[[], None]] = {
            Stage.INIT: self._init,
            Stage.SCAN_HARDWARE: self._scan_hardware,
            Stage.SCAN_BATTERY: lambda: self._publish(check_battery(self.sensors)),
            Stage.SCAN_LOAD: lambda: self._publish(check_load(self.sensors, self.config.process_top_count)),
            Stage.SCAN_STORAGE: self._scan_storage,
            Stage.SCAN_LARGE_FILES: self._scan_large_files,
            Stage.SCAN_DUPLICATES: self._scan_duplicates,
            Stage.SCAN_STALE_APPS: self._scan_stale_apps,
            Stage.SCAN_STARTUP: self._scan_startup,
            Stage.INTERACTIVE_CLEANUP: self._cleanup,
            Stage.INTERACTIVE_PRIVACY: self._privacy_cleanup,
            Stage.MAINTENANCE: self._maintenance,
            Stage.SCAN_HARDWARE_DETAIL: lambda: self._publish(check_hardware(self.sensors)),
            Stage.SCAN_UPDATES: self._scan_updates,
            Stage.SCAN_NETWORK: lambda: self._publish(check_network(self.sensors)),
            Stage.SCAN_BACKUP: lambda: self._publish(check_backup(self.sensors, self.clock())),
            Stage.SCAN_SECURITY: lambda: self._publish(check_security(self.sensors)),
            Stage.SAVE_REPORT: self._save_report,
            Stage.SUMMARY: self._summary,
        }

    def run(self) -> RunSummary:
        for stage in Stage:
            self._run_stage(stage)
        return self.aggregator.summary()

    def _run_stage(self, stage: Stage) -> None:
        logger.debug("entering stage %s", stage.value)
        try:
            self._handlers[stage]()
        except Exception as exc:  # noqa: BLE001
            logger.debug("stage %s failed", stage.value, exc_info=True)
            self.failed.append(stage)
            section = Section(stage.title)
            section.note(f"Could not complete this step: {exc}", Severity.WARNING)
            self._publish(section)
            return
        self.completed.append(stage)

    # --- helpers ----------------------------------------------------------

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self.clock())

    def _publish(self, section: Section) -> Section:
        self.sections.append(section)
        self.aggregator.record_section(section)
        render.render_section(self.console, section)
        return section

    def _ask_selection(self, prompt: str, count: int) -> list[int]:
        """Ask for items from a numbered list of *count*; returns 0-based indices."""
        answer = self.prompter.ask(f"{prompt} ({SELECTION_HINT})")
        selection = parse_selection(answer, count)
        if selection.rejected:
            self.console.print(f"  [yellow]Ignored: {escape(', '.join(selection.rejected))}[/yellow]")
        return list(selection.indices)

    def _show_trash_target(self, path: str) -> None:
        self.console.print(f"  [red]trash[/red] {escape(relative_path(path, self.home))}")

    # --- stages -----------------------------------------------------------

    def _init(self) -> None:
        self.machine = machine_line(self.sensors)
        render.render_banner(self.console, self.machine, f"{self._now():%B %d, %Y at %I:%M %p}")

    def _scan_hardware(self) -> None:
        self._publish(check_system(self.sensors, self._now()))

    def _scan_storage(self) -> None:
        section = check_storage(self.sensors)
        with self.console.status("Measuring cleanable space..."):
            self.catalog.scan()
        reclaimable = self.catalog.total_bytes(self.config.min_category_bytes)
        self.aggregator.add_reclaimable(reclaimable)
        section.note(f"Cleanable junk found: ~{format_bytes(reclaimable)}")
        self._publish(section)
        if reclaimable > _GB:
            self.aggregator.advise(
                f"You have ~{format_bytes(reclaimable)} of cleanable junk. Run the cleanup to free space."
            )

    def _scan_large_files(self) -> None:
        section = Section("Large Files")
        with self.console.status("Looking for large files...") as status:
            files = find_large_files(
                self.config.scan_roots,
                self.config.large_file_bytes,
                self.config.large_file_top_count,
                progress=lambda seen: status.update(f"Looking for large files... {seen} checked"),
                fs=self.fs,
            )
        if not files:
            section.note(f"No files over {self.config.large_file_mb} MB in the scanned folders", Severity.GOOD)
            self._publish(section)
            return
        total = sum(f.size_bytes for f in files)
        section.note(f"{len(files)} file(s) over {self.config.large_file_mb} MB, {format_bytes(total)} in total")
        self._publish(section)
        self.console.print(render.large_files_table(files, self.home))
        self.aggregator.advise(
            f"{len(files)} large file(s) use {format_bytes(total)}. Review them and archive what you no longer need."
        )

    def _scan_duplicates(self) -> None:
        section = Section("Duplicate Files")
        with self.console.status("Looking for duplicate files...") as status:
            outcome = find_duplicates(
                self.config.scan_roots,
                min_bytes=self.config.duplicate_min_bytes,
                scale_guard=self.config.duplicate_scale_guard,
                confirm_scale=lambda count: self._confirm_scale(count, status),
                progress=lambda done, total: status.update(f"Comparing files... {done}/{total}"),
                fs=self.fs,
            )
        if isinstance(outcome, Err):
            section.note(outcome.err_value.message)
            self._publish(section)
            return
        report = outcome.ok_value
        groups = by_wasted_space(report.groups)
        if not groups:
            section.note("No duplicate files found", Severity.GOOD)
            self._publish(section)
            return
        section.note(f"{len(groups)} set(s) of duplicates wasting {format_bytes(report.wasted_bytes)}", Severity.WARNING)
        self._publish(section)
        self.console.print(render.duplicate_table(groups, self.home))
        self.aggregator.advise(
            f"Duplicate files waste {format_bytes(report.wasted_bytes)}. Remove the extra copies to reclaim it."
        )
        chosen = [groups[i] for i in self._ask_selection("Remove extra copies from which sets?", len(groups))]
        if chosen:
            self._trash_duplicates(chosen)

    def _confirm_scale(self, count: int, status: Status) -> bool:
        # The spinner would redraw over the answer line.
        status.stop()
        try:
            return self.prompter.confirm(f"{count} files need to be compared, which can take a while. Continue?")
        finally:
            status.start()

    def _trash_duplicates(self, groups: Sequence[DuplicateGroup]) -> None:
        copies = sum(len(g.candidates) for g in groups)
        for group in groups:
            self.console.print(f"  keep {escape(relative_path(group.keep, self.home))}")
            for path in group.candidates:
                self._show_trash_target(path)
        if not self.prompter.confirm(f"Move {copies} duplicate copies to the Trash?"):
            logger.info("duplicate removal declined")
            return
        freed = render.render_removals(self.console, trash_duplicates(groups, self.fs), self.home)
        self.aggregator.add_freed(freed)

    def _inventory(self) -> list[AppEntry]:
        entries: list[AppEntry] = []
        for raw in self.sensors.get_list(SensorName.APP_INVENTORY) or []:
            if not isinstance(raw, dict) or not raw.get("name"):
                continue
            last_used: Any = raw.get("last_used_ts")
            entries.append(
                AppEntry(
                    name=str(raw["name"]),
                    path=str(raw.get("path") or f"{self.config.applications_dir}/{raw['name']}.app"),
                    last_used_ts=float(last_used) if last_used is not None else None,
                )
            )
        return entries

    def _scan_stale_apps(self) -> None:
        section = Section("Unused Apps")
        stale = find_stale_apps(
            self._inventory(),
            self.clock(),
            self.config.stale_app_months,
            size_of=self.fs.size_of,
            limit=self.config.stale_app_limit,
        )
        if not stale:
            section.note(f"No apps unused for {self.config.stale_app_months}+ months", Severity.GOOD)
            self._publish(section)
            return
        total = sum(app.size_bytes for app in stale)
        section.note(f"{len(stale)} app(s) unused for {self.config.stale_app_months}+ months, {format_bytes(total)}")
        self._publish(section)
        self.console.print(render.stale_apps_table(stale))
        if total > _GB:
            self.aggregator.advise(
                f"You have {len(stale)} unused apps taking up ~{format_bytes(total)}. "
                "Consider removing ones you don't need."
            )
        chosen = [stale[i] for i in self._ask_selection("Move which apps to the Trash?", len(stale))]
        if not chosen:
            return
        names = ", ".join(app.name for app in chosen)
        if not self.prompter.confirm(f"Move {names} to the Trash?"):
            logger.info("app removal declined")
            return
        freed = render.render_removals(self.console, trash_apps(chosen, self.fs))
        self.aggregator.add_freed(freed)

    def _scan_startup(self) -> None:
        section = Section("Startup Items")
        items = list_startup_items(self.sensors.get_list(SensorName.LOGIN_ITEMS), fs=self.fs)
        count = len(items)
        limit = self.config.startup_item_limit
        if count > limit:
            section.add(
                Finding(
                    "Startup Items",
                    Severity.WARNING,
                    f"{count} items launch at startup",
                    float(count),
                    f"You have {count} startup items. Reducing these will make your Mac boot faster.",
                )
            )
        else:
            section.add(Finding("Startup Items", Severity.GOOD, f"{count} items launch at startup", float(count)))
        self._publish(section)
        if not items:
            return
        self.console.print(render.startup_table(items))
        chosen = [items[i] for i in self._ask_selection("Disable which startup items?", count)]
        if chosen:
            render.render_removals(self.console, disable_items(chosen, self.runner, self.fs))

    def _cleanup(self) -> None:
        self._interactive_catalog(self.catalog, "Cleanup", self.catalog.listable(self.config.min_category_bytes))

    def _privacy_cleanup(self) -> None:
        found = self.privacy.scan()
        self._interactive_catalog(self.privacy, "Privacy Cleanup", [c for c in found if c.item_count > 0])

    def _interactive_catalog(self, catalog: Catalog, title: str, listed: Sequence[Category]) -> None:
        section = Section(title)
        if not listed:
            section.note("Nothing to clean", Severity.GOOD)
            self._publish(section)
            return
        self._publish(section)
        self.console.print(render.category_table(title, listed))
        picked = self._ask_selection("Clean which categories?", len(listed))
        if not picked:
            return
        plan = catalog.select(listed[i].key for i in picked)
        if plan.is_empty:
            return
        results = catalog.execute(plan, self.prompter.confirm, self._show_trash_target)
        freed = render.render_action_results(self.console, results)
        self.aggregator.add_freed(freed)

    def _maintenance(self) -> None:
        self._publish(check_maintenance(self.sensors))
        if not self.prompter.confirm("Flush the DNS cache? (asks for your password)"):
            return
        for argv in DNS_FLUSH_COMMANDS:
            outcome = self.runner.run(argv, timeout=60)
            if isinstance(outcome, Err):
                self.console.print(f"  [red]DNS flush failed: {outcome.err_value.message}[/red]")
                return
        self.console.print("  [green]DNS cache flushed[/green]")

    def _scan_updates(self) -> None:
        self._publish(check_updates(self.sensors))
        if self.sensors.get_bool(SensorName.STATS_APP_INSTALLED) or self.runner.which("brew") is None:
            return
        if not self.prompter.confirm("Install Stats with Homebrew?"):
            return
        outcome = self.runner.run(STATS_INSTALL, timeout=600)
        if isinstance(outcome, Err):
            self.console.print(f"  [red]Could not install Stats: {outcome.err_value.message}[/red]")
        else:
            self.console.print("  [green]Stats installed. Find it in your Applications folder.[/green]")

    def _save_report(self) -> None:
        if not self.prompter.confirm(f"Save a report to {self.config.report_dir}?"):
            return
        written = write_report(
            self.config.report_dir,
            self.aggregator.summary(),
            self.sections,
            self._now(),
            self.machine,
            self.fs,
        )
        if isinstance(written, Err):
            self.console.print(f"  [red]{written.err_value}[/red]")
        else:
            self.console.print(f"  [green]Report saved to {written.ok_value}[/green]")

    def _summary(self) -> None:
        render.render_summary(self.console, self.aggregator.summary())
