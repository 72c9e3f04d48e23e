from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence

from checkup.models.analysis import AppEntry, RemovalResult, StaleApp
from checkup.services.fs import DEFAULT_FS, FileSystem
from checkup.services.units import months_between

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MONTHS = 6

# Apple-supplied applications that are never proposed for removal.
DENYLIST: frozenset[str] = frozenset(
    {
        "Safari",
        "Mail",
        "Messages",
        "FaceTime",
        "Calendar",
        "Contacts",
        "Notes",
        "Reminders",
        "System Preferences",
        "System Settings",
        "Finder",
        "App Store",
        "Font Book",
        "Preview",
        "TextEdit",
        "Calculator",
        "Photo Booth",
        "Utilities",
        "Automator",
        "Terminal",
        "Activity Monitor",
        "Disk Utility",
        "Console",
        "Keychain Access",
        "Migration Assistant",
        "Screenshot",
        "Digital Color Meter",
        "Grapher",
        "Script Editor",
        "Siri",
    }
)


def is_protected(name: str) -> bool:
    return name.removesuffix(".app") in DENYLIST


def find_stale_apps(
    inventory: Iterable[AppEntry],
    now: float,
    threshold_months: int = DEFAULT_THRESHOLD_MONTHS,
    *,
    size_of: Callable[[str], int] = DEFAULT_FS.size_of,
    limit: int | None = None,
) -> list[StaleApp]:
    """Apps unused for at least *threshold_months*, largest first.

    Apps without a last-used date are skipped: missing metadata is not
    evidence of staleness.
    """
    stale: list[StaleApp] = []
    for entry in inventory:
        if is_protected(entry.name):
            continue
        if entry.last_used_ts is None:
            logger.debug("%s has no last-used date, skipped", entry.name)
            continue
        months = months_between(entry.last_used_ts, now)
        if months < threshold_months:
            continue
        stale.append(StaleApp(entry.name, entry.path, size_of(entry.path), months))
    stale.sort(key=lambda app: app.size_bytes, reverse=True)
    if limit is not None:
        return stale[:limit]
    return stale


def trash_apps(apps: Sequence[StaleApp], fs: FileSystem = DEFAULT_FS) -> list[RemovalResult]:
    """Move apps to the Trash; nothing is ever deleted outright."""
    results: list[RemovalResult] = []
    for app in apps:
        if is_protected(app.name):
            results.append(RemovalResult(app.name, False, 0, "protected system app"))
            continue
        if not fs.exists(app.path):
            results.append(RemovalResult(app.name, False, 0, "already gone"))
            continue
        try:
            fs.move_to_trash(app.path)
        except OSError as exc:
            logger.warning("Could not move %s to Trash: %s", app.name, exc)
            results.append(RemovalResult(app.name, False, 0, "could not move (may need admin rights)"))
            continue
        results.append(RemovalResult(app.name, True, app.size_bytes, "moved to Trash"))
    return results
