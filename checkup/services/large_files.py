from __future__ import annotations

import heapq
import logging
from collections.abc import Callable, Sequence

from checkup.models.analysis import LargeFile
from checkup.services.fs import DEFAULT_FS, FileSystem

logger = logging.getLogger(__name__)


def find_large_files(
    roots: Sequence[str],
    min_bytes: int,
    top_n: int,
    *,
    progress: Callable[[int], None] | None = None,
    fs: FileSystem = DEFAULT_FS,
) -> list[LargeFile]:
    """Largest files at or above *min_bytes* under *roots*, biggest first."""
    # Min-heap of (size, path, file) so the smallest kept entry is evicted first.
    heap: list[tuple[int, str, LargeFile]] = []
    seen: set[str] = set()
    visited = 0
    for raw in roots:
        root = fs.expanduser(raw)
        if not fs.is_dir(root):
            continue
        for info in fs.walk_files(root, skip_hidden=True):
            visited += 1
            if progress is not None and visited % 1000 == 0:
                progress(visited)
            if info.size < min_bytes or info.path in seen:
                continue
            seen.add(info.path)
            entry = (info.size, info.path, LargeFile(info.path, info.size, info.mtime))
            if len(heap) < top_n:
                heapq.heappush(heap, entry)
            elif info.size > heap[0][0]:
                heapq.heapreplace(heap, entry)
    logger.debug("large-file scan visited %d files", visited)
    return [item for _, _, item in sorted(heap, key=lambda e: (-e[0], e[1]))]
