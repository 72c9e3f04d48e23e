# Filesystem seam used by the catalog probes, the cleanup actions and the
# duplicate/stale-app scans.  Every size query tolerates missing paths
# (reported as 0) and never follows symlinks, so probing is read-only and
# cannot wander outside the category it measures.

from __future__ import annotations

import logging
import os
import shutil
import stat as statmod
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from send2trash import send2trash

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class FileInfo:
    path: str
    name: str
    is_dir: bool
    size: int
    mtime: float


class FileSystem:
    def expanduser(self, path: str) -> str:
        return os.path.expanduser(path)

    def exists(self, path: str) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path) and not os.path.islink(path)

    def info(self, path: str) -> FileInfo | None:
        try:
            st = os.lstat(path)
        except OSError:
            return None
        return FileInfo(
            path=path,
            name=os.path.basename(path.rstrip("/")) or path,
            is_dir=statmod.S_ISDIR(st.st_mode),
            size=st.st_size,
            mtime=st.st_mtime,
        )

    def listdir(self, path: str) -> list[FileInfo]:
        """Return the direct children of *path* sorted by name; ``[]`` if unreadable."""
        entries: list[FileInfo] = []
        try:
            with os.scandir(path) as it:
                for entry in it:
                    try:
                        st = entry.stat(follow_symlinks=False)
                    except OSError:
                        continue
                    entries.append(
                        FileInfo(
                            path=entry.path,
                            name=entry.name,
                            is_dir=statmod.S_ISDIR(st.st_mode),
                            size=st.st_size,
                            mtime=st.st_mtime,
                        )
                    )
        except OSError:
            logger.debug("cannot list %s", path)
            return []
        entries.sort(key=lambda e: e.name)
        return entries

    def walk_files(self, root: str, skip_hidden: bool = False) -> Iterator[FileInfo]:
        """Depth-first, lexicographically ordered walk yielding regular files."""
        stack = [root]
        while stack:
            current = stack.pop()
            children = self.listdir(current)
            subdirs: list[str] = []
            for child in children:
                if skip_hidden and child.name.startswith("."):
                    continue
                if child.is_dir:
                    subdirs.append(child.path)
                else:
                    yield child
            stack.extend(reversed(subdirs))

    def size_of(self, path: str) -> int:
        info = self.info(path)
        if info is None:
            return 0
        if not info.is_dir:
            return info.size
        return sum(f.size for f in self.walk_files(path))

    def read_text(self, path: str) -> str:
        return Path(path).read_text(encoding="utf-8")

    def read_chunks(self, path: str, chunk_size: int = 1024 * 1024) -> Iterator[bytes]:
        with open(path, "rb") as fh:
            while chunk := fh.read(chunk_size):
                yield chunk

    def write_text(self, path: str, content: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        Path(path).write_text(content, encoding="utf-8")

    def remove(self, path: str) -> None:
        """Delete a file, symlink or whole directory tree."""
        if os.path.isdir(path) and not os.path.islink(path):
            shutil.rmtree(path)
        else:
            os.unlink(path)

    def remove_empty_dirs(self, root: str) -> None:
        for dirpath, dirnames, _ in os.walk(root, topdown=False):
            for name in dirnames:
                candidate = os.path.join(dirpath, name)
                try:
                    if not os.listdir(candidate):
                        os.rmdir(candidate)
                except OSError:
                    continue

    def move_to_trash(self, path: str) -> None:
        send2trash(path)


DEFAULT_FS = FileSystem()
