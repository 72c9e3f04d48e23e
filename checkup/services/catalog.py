from __future__ import annotations

from typing import TypeAlias

import logging
import os
import time
from collections.abc import Callable, Iterable, Sequence

from result import Err

from checkup.config.schema import AppConfig
from checkup.models.catalog import ActionResult, Category, CategorySpec, ExecutionPlan
from checkup.models.enums import ActionKind, ActionStatus, ProbeKind
from checkup.services.actions import ActionContext, Confirm, Preview, run_action
from checkup.services.commands import DEFAULT_RUNNER, CommandRunner
from checkup.services.fs import DEFAULT_FS, FileSystem
from checkup.services.units import SECONDS_PER_DAY

logger = logging.getLogger(__name__)

# Localisations kept when stripping language bundles out of applications.
ENGLISH_LOCALES = frozenset({"Base.lproj", "en.lproj", "English.lproj", "en_US.lproj", "en_GB.lproj", "en_AU.lproj"})

SIDECAR_NAMES = frozenset({".DS_Store"})
SIDECAR_PREFIX = "._"

BROWSER_CACHE_PATHS: tuple[str, ...] = (
    "~/Library/Caches/Google/Chrome",
    "~/Library/Caches/com.apple.Safari",
    "~/Library/Caches/Firefox",
    "~/Library/Caches/com.microsoft.edgemac",
    "~/Library/Caches/company.thebrowser.Browser",
    "~/Library/Caches/com.brave.Browser",
)


def default_category_specs(config: AppConfig) -> list[CategorySpec]:
    specs = [
        CategorySpec(
            key="app_caches",
            name="App Caches",
            description="Temporary data apps store to load faster. Safe to delete, apps rebuild them.",
            action=ActionKind.CLEAR_CONTENTS,
            paths=("~/Library/Caches",),
        ),
        CategorySpec(
            key="app_logs",
            name="App Logs",
            description="Log files older than a week. Only useful for debugging.",
            action=ActionKind.DELETE_AGED,
            paths=("~/Library/Logs",),
            age_days=7,
        ),
        CategorySpec(
            key="trash",
            name="Trash",
            description="Files you already deleted but haven't emptied yet.",
            action=ActionKind.EMPTY_TRASH,
            paths=("~/.Trash",),
        ),
        CategorySpec(
            key="old_downloads",
            name="Old Downloads (30+ days)",
            description="Files in Downloads older than 30 days. Review before deleting.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            probe=ProbeKind.AGED_FILES,
            paths=("~/Downloads",),
            age_days=30,
        ),
        CategorySpec(
            key="browser_caches",
            name="Browser Caches",
            description="Cached web pages and data. Pages may load slightly slower temporarily.",
            action=ActionKind.REMOVE_TREE,
            paths=BROWSER_CACHE_PATHS,
        ),
        CategorySpec(
            key="xcode_derived_data",
            name="Xcode Build Data",
            description="Old Xcode build artifacts. Rebuilds automatically when needed.",
            action=ActionKind.REMOVE_TREE,
            paths=("~/Library/Developer/Xcode/DerivedData",),
        ),
        CategorySpec(
            key="homebrew_cache",
            name="Homebrew Cache",
            description="Downloaded package files. Homebrew re-downloads if needed.",
            action=ActionKind.DELEGATE_TO_TOOL,
            probe=ProbeKind.TOOL_CACHE,
            command=("brew", "cleanup", "--prune=all"),
            locate_command=("brew", "--cache"),
        ),
        CategorySpec(
            key="npm_cache",
            name="npm Cache",
            description="Node.js package cache. Reinstalls re-download as needed.",
            action=ActionKind.DELEGATE_TO_TOOL,
            paths=("~/.npm/_cacache",),
            command=("npm", "cache", "clean", "--force"),
        ),
        CategorySpec(
            key="pip_cache",
            name="Python pip Cache",
            description="Python package cache. Reinstalls re-download as needed.",
            action=ActionKind.REMOVE_TREE,
            paths=("~/Library/Caches/pip",),
        ),
        CategorySpec(
            key="ios_backups",
            name="iPhone/iPad Backups",
            description="Local device backups. Make sure iCloud or a newer backup exists first.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            paths=("~/Library/Application Support/MobileSync/Backup",),
        ),
        CategorySpec(
            key="mail_attachments",
            name="Mail Attachments",
            description="Attachments Mail saved when you opened them. Still available in the messages.",
            action=ActionKind.CLEAR_CONTENTS,
            paths=("~/Library/Containers/com.apple.mail/Data/Library/Mail Downloads",),
        ),
        CategorySpec(
            key="docker_data",
            name="Docker Data",
            description="Docker Desktop images, containers and volumes. Everything inside is lost.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            paths=("~/Library/Containers/com.docker.docker/Data",),
        ),
        CategorySpec(
            key="local_snapshots",
            name="Local Time Machine Snapshots",
            description="Snapshots macOS keeps on the internal disk. Thinning lets macOS reclaim the space.",
            action=ActionKind.SYSTEM_DELEGATE,
            probe=ProbeKind.SNAPSHOTS,
            command=("tmutil", "thinlocalsnapshots", "/", "999999999999", "4"),
            locate_command=("tmutil", "listlocalsnapshots", "/"),
        ),
        CategorySpec(
            key="language_files",
            name="Unused Language Files",
            description="Translations for languages other than English inside your apps.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            probe=ProbeKind.LOCALES,
            paths=(config.applications_dir,),
        ),
        CategorySpec(
            key="metadata_sidecars",
            name="Finder Metadata Files",
            description=".DS_Store and ._ files Finder leaves behind. Recreated as needed.",
            action=ActionKind.REMOVE_TREE,
            probe=ProbeKind.SIDECARS,
            paths=tuple(config.scan_roots),
        ),
    ]
    specs.extend(config.extra_categories)
    return specs


def privacy_category_specs() -> list[CategorySpec]:
    return [
        CategorySpec(
            key="saved_app_state",
            name="Saved Application State",
            description="Window state apps restore on relaunch.",
            action=ActionKind.CLEAR_CONTENTS,
            paths=("~/Library/Saved Application State",),
        ),
        CategorySpec(
            key="recent_items",
            name="Recent Items Lists",
            description="Recently opened documents, apps and servers.",
            action=ActionKind.CLEAR_CONTENTS,
            paths=("~/Library/Application Support/com.apple.sharedfilelist",),
        ),
        CategorySpec(
            key="quicklook_thumbnails",
            name="QuickLook Thumbnails",
            description="Preview thumbnails of files you have looked at.",
            action=ActionKind.REMOVE_TREE,
            paths=("~/Library/Caches/com.apple.QuickLook.thumbnailcache",),
        ),
        CategorySpec(
            key="browser_history",
            name="Browser History",
            description="Browsing history databases. Quit your browsers first.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            paths=(
                "~/Library/Safari/History.db",
                "~/Library/Application Support/Google/Chrome/Default/History",
                "~/Library/Application Support/Microsoft Edge/Default/History",
                "~/Library/Application Support/BraveSoftware/Brave-Browser/Default/History",
            ),
        ),
        CategorySpec(
            key="shell_history",
            name="Shell History",
            description="Commands typed in Terminal.",
            action=ActionKind.CONFIRM_THEN_REMOVE,
            paths=("~/.zsh_history", "~/.bash_history", "~/.python_history"),
        ),
    ]


Probe: TypeAlias = Callable[["Catalog", CategorySpec], tuple[list[str], int, int]]


class Catalog:
    """Reclaimable-space categories: discover sizes, list, select and clean.

    ``scan`` is read-only.  Each probe returns the concrete targets the bound
    action will operate on, so execution never rediscovers paths.
    """

    def __init__(
        self,
        specs: Sequence[CategorySpec],
        fs: FileSystem = DEFAULT_FS,
        runner: CommandRunner = DEFAULT_RUNNER,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.specs = list(specs)
        self.fs = fs
        self.runner = runner
        self.clock = clock
        self._categories: list[Category] = []

    @property
    def categories(self) -> list[Category]:
        return list(self._categories)

    def scan(self) -> list[Category]:
        found: list[Category] = []
        for spec in self.specs:
            probe = _PROBES[spec.probe]
            try:
                targets, size, count = probe(self, spec)
            except OSError as exc:
                logger.warning("Could not measure %s: %s", spec.name, exc)
                targets, size, count = [], 0, 0
            found.append(
                Category(
                    key=spec.key,
                    name=spec.name,
                    description=spec.description,
                    action=spec.action,
                    paths=[self.fs.expanduser(p) for p in spec.paths],
                    size_bytes=size,
                    item_count=count,
                    targets=targets,
                    age_days=spec.age_days,
                    command=spec.command,
                )
            )
        self._categories = found
        return list(found)

    def listable(self, floor_bytes: int) -> list[Category]:
        return [c for c in self._categories if c.is_listable(floor_bytes)]

    def total_bytes(self, floor_bytes: int) -> int:
        return sum(c.size_bytes for c in self.listable(floor_bytes))

    def select(self, keys: Iterable[str]) -> ExecutionPlan:
        by_key = {c.key: c for c in self._categories}
        chosen: list[Category] = []
        dropped: list[str] = []
        for key in keys:
            category = by_key.get(key)
            if category is None:
                logger.warning("Unknown cleanup category %r ignored", key)
                dropped.append(key)
                continue
            if category not in chosen:
                chosen.append(category)
        return ExecutionPlan(categories=tuple(chosen), dropped=tuple(dropped))

    def execute(self, plan: ExecutionPlan, confirm: Confirm, preview: Preview | None = None) -> list[ActionResult]:
        context = ActionContext(fs=self.fs, runner=self.runner, confirm=confirm, clock=self.clock)
        if preview is not None:
            context.preview = preview
        results: list[ActionResult] = []
        for category in plan.categories:
            result = run_action(category, context)
            if not result.success:
                log = logger.info if result.status is ActionStatus.DECLINED else logger.warning
                log("%s: %s", category.name, result.message or result.status.value)
            results.append(result)
        return results


# --- probes -----------------------------------------------------------------


def _probe_directory(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    fs = catalog.fs
    targets: list[str] = []
    size = 0
    for raw in spec.paths:
        path = fs.expanduser(raw)
        if not fs.exists(path):
            continue
        targets.append(path)
        size += fs.size_of(path)
    return targets, size, len(targets)


def _probe_aged_files(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    fs = catalog.fs
    cutoff = catalog.clock() - (spec.age_days or 0) * SECONDS_PER_DAY
    targets: list[str] = []
    size = 0
    for raw in spec.paths:
        for entry in fs.listdir(fs.expanduser(raw)):
            if entry.is_dir or entry.mtime >= cutoff:
                continue
            targets.append(entry.path)
            size += entry.size
    return targets, size, len(targets)


def _probe_tool_cache(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    if not spec.locate_command or catalog.runner.which(spec.locate_command[0]) is None:
        return [], 0, 0
    located = catalog.runner.run(spec.locate_command)
    if isinstance(located, Err):
        logger.debug("cannot locate %s: %s", spec.name, located.err_value.message)
        return [], 0, 0
    path = located.ok_value.stdout.strip()
    if not path or not catalog.fs.is_dir(path):
        return [], 0, 0
    return [path], catalog.fs.size_of(path), 1


def _probe_snapshots(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    if not spec.locate_command:
        return [], 0, 0
    listed = catalog.runner.run(spec.locate_command)
    if isinstance(listed, Err):
        logger.debug("cannot list snapshots: %s", listed.err_value.message)
        return [], 0, 0
    snapshots = parse_snapshot_list(listed.ok_value.stdout)
    # Thinning is scheduled by the OS, so no byte size is known up front.
    return snapshots, 0, len(snapshots)


def parse_snapshot_list(text: str) -> list[str]:
    names: list[str] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.endswith(":"):
            continue
        if "com.apple" in line or line[:4].isdigit():
            names.append(line)
    return names


def _probe_locales(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    fs = catalog.fs
    targets: list[str] = []
    size = 0
    for raw in spec.paths:
        for app in fs.listdir(fs.expanduser(raw)):
            if not app.is_dir or not app.name.endswith(".app"):
                continue
            resources = os.path.join(app.path, "Contents", "Resources")
            for bundle in fs.listdir(resources):
                if not bundle.is_dir or not bundle.name.endswith(".lproj"):
                    continue
                if bundle.name in ENGLISH_LOCALES:
                    continue
                targets.append(bundle.path)
                size += fs.size_of(bundle.path)
    return targets, size, len(targets)


def _probe_sidecars(catalog: Catalog, spec: CategorySpec) -> tuple[list[str], int, int]:
    fs = catalog.fs
    targets: list[str] = []
    size = 0
    for raw in spec.paths:
        root = fs.expanduser(raw)
        if not fs.is_dir(root):
            continue
        for entry in fs.walk_files(root):
            if entry.name in SIDECAR_NAMES or entry.name.startswith(SIDECAR_PREFIX):
                targets.append(entry.path)
                size += entry.size
    return targets, size, len(targets)


_PROBES: dict[ProbeKind, Probe] = {
    ProbeKind.DIRECTORY: _probe_directory,
    ProbeKind.AGED_FILES: _probe_aged_files,
    ProbeKind.TOOL_CACHE: _probe_tool_cache,
    ProbeKind.SNAPSHOTS: _probe_snapshots,
    ProbeKind.LOCALES: _probe_locales,
    ProbeKind.SIDECARS: _probe_sidecars,
}
