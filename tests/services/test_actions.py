from __future__ import annotations

from pathlib import Path

from checkup.models.enums import ActionKind, ActionStatus
from checkup.services.actions import ActionContext, run_action
from tests.factories import NOW, make_category, make_file
from tests.fakes import BrokenTrashFileSystem, FakeRunner, TrashFileSystem, failed

_DAY = 86_400


class _Confirm:
    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.prompts: list[str] = []

    def __call__(self, text: str) -> bool:
        self.prompts.append(text)
        return self.answer


def _ctx(tmp_path: Path, runner: FakeRunner | None = None, confirm: _Confirm | None = None) -> ActionContext:
    return ActionContext(
        fs=TrashFileSystem(tmp_path / "trash"),
        runner=runner or FakeRunner(),
        confirm=confirm or _Confirm(),
        clock=lambda: NOW,
    )


class TestClearContents:
    def test_keeps_the_folder(self, tmp_path: Path) -> None:
        caches = tmp_path / "Caches"
        make_file(caches / "a/one.db", 400)
        make_file(caches / "two.db", 100)
        category = make_category("app_caches", [str(caches)], ActionKind.CLEAR_CONTENTS)

        result = run_action(category, _ctx(tmp_path))

        assert result.status is ActionStatus.DONE
        assert result.bytes_freed == 500
        assert caches.is_dir()
        assert list(caches.iterdir()) == []

    def test_empty_trash_uses_the_same_behaviour(self, tmp_path: Path) -> None:
        trash = tmp_path / ".Trash"
        make_file(trash / "deleted.txt", 64)
        result = run_action(make_category("trash", [str(trash)], ActionKind.EMPTY_TRASH), _ctx(tmp_path))
        assert result.bytes_freed == 64
        assert trash.is_dir()


class TestDeleteAged:
    def test_only_old_files_go(self, tmp_path: Path) -> None:
        logs = tmp_path / "Logs"
        make_file(logs / "old/app.log", 300, mtime=NOW - 10 * _DAY)
        make_file(logs / "fresh.log", 200, mtime=NOW - _DAY)
        category = make_category("app_logs", [str(logs)], ActionKind.DELETE_AGED, age_days=7)

        result = run_action(category, _ctx(tmp_path))

        assert result.bytes_freed == 300
        assert (logs / "fresh.log").exists()
        assert not (logs / "old").exists()


class TestDelegateToTool:
    def test_freed_bytes_come_from_sizing_not_the_tool(self, tmp_path: Path) -> None:
        cache = tmp_path / "npm"
        make_file(cache / "blob", 1_000)
        command = ("npm", "cache", "clean", "--force")
        runner = FakeRunner({command: "freed 9 TB!"})
        category = make_category("npm_cache", [str(cache)], ActionKind.DELEGATE_TO_TOOL, command=command)

        result = run_action(category, _ctx(tmp_path, runner))

        assert result.status is ActionStatus.DONE
        assert result.bytes_freed == 0
        assert runner.calls == [command]

    def test_tool_failure(self, tmp_path: Path) -> None:
        cache = tmp_path / "npm"
        make_file(cache / "blob", 10)
        command = ("npm", "cache", "clean", "--force")
        runner = FakeRunner({command: failed(command, "EACCES")})
        category = make_category("npm_cache", [str(cache)], ActionKind.DELEGATE_TO_TOOL, command=command)
        result = run_action(category, _ctx(tmp_path, runner))
        assert result.status is ActionStatus.FAILED
        assert result.message == "EACCES"


class TestConfirmThenRemove:
    def test_declined_touches_nothing(self, tmp_path: Path) -> None:
        backup = make_file(tmp_path / "Backup/device.plist", 50)
        category = make_category("ios_backups", [str(backup.parent)], ActionKind.CONFIRM_THEN_REMOVE, name="Backups")
        confirm = _Confirm(answer=False)

        result = run_action(category, _ctx(tmp_path, confirm=confirm))

        assert result.status is ActionStatus.DECLINED
        assert backup.exists()
        assert confirm.prompts == ["Move 1 item from Backups (50 B) to the Trash?"]

    def test_lists_every_target_before_asking(self, tmp_path: Path) -> None:
        first = make_file(tmp_path / "Downloads/a.zip", 10)
        second = make_file(tmp_path / "Downloads/b.zip", 20)
        category = make_category("old_downloads", [str(first), str(second)], ActionKind.CONFIRM_THEN_REMOVE)
        events: list[str] = []

        def decline(text: str) -> bool:
            events.append(text)
            return False

        ctx = _ctx(tmp_path)
        ctx.preview = events.append
        ctx.confirm = decline

        run_action(category, ctx)

        assert events == [str(first), str(second), "Move 2 items from Old Downloads (30 B) to the Trash?"]
        assert first.exists()

    def test_confirmed_moves_to_trash(self, tmp_path: Path) -> None:
        first = make_file(tmp_path / "Downloads/a.zip", 10)
        second = make_file(tmp_path / "Downloads/b.zip", 20)
        category = make_category("old_downloads", [str(first), str(second)], ActionKind.CONFIRM_THEN_REMOVE)
        ctx = _ctx(tmp_path)

        result = run_action(category, ctx)

        assert result.status is ActionStatus.DONE
        assert result.bytes_freed == 30
        assert ctx.fs.trashed == [str(first), str(second)]  # type: ignore[attr-defined]

    def test_trash_failure_is_reported(self, tmp_path: Path) -> None:
        item = make_file(tmp_path / "Downloads/a.zip", 10)
        category = make_category("old_downloads", [str(item)], ActionKind.CONFIRM_THEN_REMOVE)
        ctx = _ctx(tmp_path)
        ctx.fs = BrokenTrashFileSystem(tmp_path / "trash")

        result = run_action(category, ctx)

        assert result.status is ActionStatus.FAILED
        assert str(item) in result.message
        assert item.exists()


class TestSystemDelegate:
    def test_runs_without_targets(self, tmp_path: Path) -> None:
        command = ("tmutil", "thinlocalsnapshots", "/", "999999999999", "4")
        runner = FakeRunner({command: "Thinned local snapshots:\n"})
        category = make_category("local_snapshots", [], ActionKind.SYSTEM_DELEGATE, command=command)

        result = run_action(category, _ctx(tmp_path, runner))

        assert result.status is ActionStatus.DONE
        assert result.bytes_freed == 0
        assert result.message == "reclamation scheduled by macOS"


def test_all_targets_gone(tmp_path: Path) -> None:
    category = make_category("pip_cache", [str(tmp_path / "vanished")], ActionKind.REMOVE_TREE)
    result = run_action(category, _ctx(tmp_path))
    assert result.status is ActionStatus.MISSING
    assert result.bytes_freed == 0
