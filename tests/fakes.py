from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path

from result import Err, Ok

from checkup.services.commands import CommandError, CommandErrorCode, CommandOutput, CommandResult, CommandRunner
from checkup.services.fs import FileSystem


class FakeRunner(CommandRunner):
    """Scripted command runner.  Unscripted commands fail with NOT_FOUND."""

    def __init__(
        self,
        outputs: dict[tuple[str, ...], str | CommandResult] | None = None,
        tools: Sequence[str] = (),
    ) -> None:
        super().__init__()
        self.outputs = dict(outputs or {})
        self.tools = set(tools)
        self.calls: list[tuple[str, ...]] = []

    def which(self, name: str) -> str | None:
        return f"/usr/local/bin/{name}" if name in self.tools else None

    def run(self, argv: Sequence[str], timeout: float | None = None, check: bool = True) -> CommandResult:
        args = tuple(argv)
        self.calls.append(args)
        scripted = self.outputs.get(args)
        if scripted is None:
            return Err(CommandError(CommandErrorCode.NOT_FOUND, args, f"{args[0]}: command not found"))
        if isinstance(scripted, str):
            return Ok(CommandOutput(scripted, "", 0))
        return scripted


def failed(argv: Sequence[str], message: str = "boom") -> CommandResult:
    return Err(CommandError(CommandErrorCode.FAILED, tuple(argv), message))


class TrashFileSystem(FileSystem):
    """Real filesystem whose Trash is a plain directory under the test's tmp_path."""

    def __init__(self, trash: Path, home: Path | None = None) -> None:
        self.trash = trash
        self.home = home
        self.trashed: list[str] = []
        trash.mkdir(parents=True, exist_ok=True)

    def expanduser(self, path: str) -> str:
        if self.home is not None and (path == "~" or path.startswith("~/")):
            return str(self.home) + path[1:]
        return super().expanduser(path)

    def move_to_trash(self, path: str) -> None:
        target = self.trash / f"{len(self.trashed)}-{Path(path).name}"
        shutil.move(path, target)
        self.trashed.append(path)


class BrokenTrashFileSystem(TrashFileSystem):
    def move_to_trash(self, path: str) -> None:
        raise PermissionError(f"Operation not permitted: {path}")
