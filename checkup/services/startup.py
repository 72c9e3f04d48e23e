from __future__ import annotations

import logging
import plistlib
from collections.abc import Iterable, Sequence

from result import Err

from checkup.models.analysis import RemovalResult, StartupItem
from checkup.models.enums import StartupKind
from checkup.services.commands import DEFAULT_RUNNER, CommandRunner
from checkup.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)

LAUNCH_AGENTS_DIR = "~/Library/LaunchAgents"


def friendly_name(label: str) -> str:
    """``com.spotify.webhelper`` -> ``Spotify Webhelper``."""
    trimmed = label.removeprefix("com.")
    return " ".join(part[:1].upper() + part[1:] for part in trimmed.split(".") if part)


def _agent_disabled(path: str, fs: FileSystem) -> bool:
    try:
        payload = plistlib.loads(b"".join(fs.read_chunks(path)))
    except (OSError, plistlib.InvalidFileException, ValueError) as exc:
        logger.debug("cannot parse %s: %s", path, exc)
        return False
    return isinstance(payload, dict) and bool(payload.get("Disabled", False))


def list_launch_agents(directory: str = LAUNCH_AGENTS_DIR, fs: FileSystem = DEFAULT_FS) -> list[StartupItem]:
    items: list[StartupItem] = []
    for entry in fs.listdir(fs.expanduser(directory)):
        if entry.is_dir or not entry.name.endswith(".plist"):
            continue
        label = entry.name.removesuffix(".plist")
        if label.startswith("com.apple."):
            continue
        if _agent_disabled(entry.path, fs):
            continue
        items.append(StartupItem(friendly_name(label), StartupKind.LAUNCH_AGENT, entry.path))
    return items


def list_startup_items(
    login_items: Iterable[str] | None,
    directory: str = LAUNCH_AGENTS_DIR,
    fs: FileSystem = DEFAULT_FS,
) -> list[StartupItem]:
    items = [
        StartupItem(name.strip(), StartupKind.LOGIN_ITEM, name.strip())
        for name in (login_items or [])
        if name and name.strip()
    ]
    items.extend(list_launch_agents(directory, fs))
    return items


def _disable_argv(item: StartupItem) -> tuple[str, ...]:
    if item.kind is StartupKind.LOGIN_ITEM:
        escaped = item.detail.replace("\\", "\\\\").replace('"', '\\"')
        script = f'tell application "System Events" to delete login item "{escaped}"'
        return ("osascript", "-e", script)
    return ("launchctl", "unload", "-w", item.detail)


def disable_items(
    items: Sequence[StartupItem],
    runner: CommandRunner = DEFAULT_RUNNER,
    fs: FileSystem = DEFAULT_FS,
) -> list[RemovalResult]:
    results: list[RemovalResult] = []
    for item in items:
        if item.kind is StartupKind.LAUNCH_AGENT and not fs.exists(item.detail):
            results.append(RemovalResult(item.name, False, 0, "already gone"))
            continue
        outcome = runner.run(_disable_argv(item))
        if isinstance(outcome, Err):
            logger.warning("Could not disable %s: %s", item.name, outcome.err_value.message)
            results.append(RemovalResult(item.name, False, 0, outcome.err_value.message))
            continue
        verb = "removed login item" if item.kind is StartupKind.LOGIN_ITEM else "disabled"
        results.append(RemovalResult(item.name, True, 0, verb))
    return results
