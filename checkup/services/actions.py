"""Cleanup actions bound to reclaimable categories.

Each handler receives a category whose ``targets`` were resolved at scan time.
Targets are re-checked immediately before acting; a target that has vanished
since the scan is treated as already cleaned.  Freed bytes are always
measured by sizing before and after, never taken from a tool's own output.
"""

from __future__ import annotations

from typing import TypeAlias

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from result import Err

from checkup.models.catalog import ActionResult, Category
from checkup.models.enums import ActionKind, ActionStatus
from checkup.services.commands import DEFAULT_RUNNER, CommandRunner
from checkup.services.formatting import format_bytes
from checkup.services.fs import DEFAULT_FS, FileSystem
from checkup.services.units import SECONDS_PER_DAY

logger = logging.getLogger(__name__)

Confirm: TypeAlias = Callable[[str], bool]
Preview: TypeAlias = Callable[[str], None]


@dataclass(slots=True)
class ActionContext:
    fs: FileSystem = DEFAULT_FS
    runner: CommandRunner = DEFAULT_RUNNER
    confirm: Confirm = field(default=lambda _prompt: False)
    # Receives each path a confirm-then-remove action will trash, before it asks.
    preview: Preview = field(default=lambda _path: None)
    clock: Callable[[], float] = time.time


Handler: TypeAlias = Callable[[Category, list[str], ActionContext], ActionResult]


def _measure(fs: FileSystem, paths: list[str]) -> int:
    return sum(fs.size_of(p) for p in paths)


def _finish(category: Category, freed: int, failures: list[str], verb: str) -> ActionResult:
    if failures:
        shown = ", ".join(failures[:3])
        more = f" and {len(failures) - 3} more" if len(failures) > 3 else ""
        return ActionResult(
            category.key,
            category.name,
            ActionStatus.FAILED,
            max(0, freed),
            f"could not remove {shown}{more}",
        )
    return ActionResult(category.key, category.name, ActionStatus.DONE, max(0, freed), f"{verb} {format_bytes(freed)}")


def _delete(fs: FileSystem, path: str, failures: list[str]) -> None:
    try:
        fs.remove(path)
    except FileNotFoundError:
        return
    except OSError as exc:
        logger.debug("cannot remove %s: %s", path, exc)
        failures.append(path)


def _clear_contents(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    before = _measure(ctx.fs, live)
    failures: list[str] = []
    for directory in live:
        for child in ctx.fs.listdir(directory):
            _delete(ctx.fs, child.path, failures)
    return _finish(category, before - _measure(ctx.fs, live), failures, "cleared")


def _delete_aged(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    cutoff = ctx.clock() - (category.age_days or 0) * SECONDS_PER_DAY
    before = _measure(ctx.fs, live)
    failures: list[str] = []
    for directory in live:
        for entry in list(ctx.fs.walk_files(directory)):
            if entry.mtime < cutoff:
                _delete(ctx.fs, entry.path, failures)
        ctx.fs.remove_empty_dirs(directory)
    return _finish(category, before - _measure(ctx.fs, live), failures, "cleared")


def _remove_tree(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    before = _measure(ctx.fs, live)
    failures: list[str] = []
    for path in live:
        _delete(ctx.fs, path, failures)
    return _finish(category, before - _measure(ctx.fs, live), failures, "removed")


def _delegate_to_tool(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    if not category.command:
        return ActionResult(category.key, category.name, ActionStatus.FAILED, 0, "no cleanup command configured")
    before = _measure(ctx.fs, live)
    outcome = ctx.runner.run(category.command, timeout=600)
    freed = max(0, before - _measure(ctx.fs, live))
    if isinstance(outcome, Err):
        return ActionResult(category.key, category.name, ActionStatus.FAILED, freed, outcome.err_value.message)
    return ActionResult(category.key, category.name, ActionStatus.DONE, freed, f"cleaned {format_bytes(freed)}")


def _confirm_then_remove(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    size = _measure(ctx.fs, live)
    noun = "item" if len(live) == 1 else "items"
    for path in live:
        ctx.preview(path)
    prompt = f"Move {len(live)} {noun} from {category.name} ({format_bytes(size)}) to the Trash?"
    if not ctx.confirm(prompt):
        logger.info("%s skipped at confirmation", category.name)
        return ActionResult(category.key, category.name, ActionStatus.DECLINED, 0, "skipped")

    moved = 0
    failures: list[str] = []
    for path in live:
        if not ctx.fs.exists(path):
            continue
        item_size = ctx.fs.size_of(path)
        try:
            ctx.fs.move_to_trash(path)
        except OSError as exc:
            logger.debug("cannot trash %s: %s", path, exc)
            failures.append(path)
            continue
        moved += item_size
    return _finish(category, moved, failures, "moved to Trash")


def _system_delegate(category: Category, live: list[str], ctx: ActionContext) -> ActionResult:
    outcome = ctx.runner.run(category.command, timeout=600)
    if isinstance(outcome, Err):
        return ActionResult(category.key, category.name, ActionStatus.FAILED, 0, outcome.err_value.message)
    # The OS reclaims the space in the background.
    return ActionResult(category.key, category.name, ActionStatus.DONE, 0, "reclamation scheduled by macOS")


_HANDLERS: dict[ActionKind, Handler] = {
    ActionKind.CLEAR_CONTENTS: _clear_contents,
    ActionKind.DELETE_AGED: _delete_aged,
    ActionKind.EMPTY_TRASH: _clear_contents,
    ActionKind.DELEGATE_TO_TOOL: _delegate_to_tool,
    ActionKind.REMOVE_TREE: _remove_tree,
    ActionKind.CONFIRM_THEN_REMOVE: _confirm_then_remove,
    ActionKind.SYSTEM_DELEGATE: _system_delegate,
}


def run_action(category: Category, ctx: ActionContext) -> ActionResult:
    """Run the action bound to *category*; OS errors become a FAILED result."""
    if category.action is ActionKind.SYSTEM_DELEGATE:
        live: list[str] = []
    else:
        live = [t for t in category.targets if ctx.fs.exists(t)]
        if not live:
            return ActionResult(category.key, category.name, ActionStatus.MISSING, 0, "already gone")
    handler = _HANDLERS[category.action]
    try:
        return handler(category, live, ctx)
    except OSError as exc:
        return ActionResult(category.key, category.name, ActionStatus.FAILED, 0, str(exc))
