"""Content-based duplicate detection.

Phase 1 buckets candidate files by exact size; a size seen once cannot have
a duplicate and is dropped before any file is read.  Phase 2 hashes only the
surviving buckets and groups by ``(size, digest)``.  A group survives only
with two or more paths, so equal sizes with different content never show up.

Traversal is deterministic (roots in configured order, entries sorted by
name), which makes "first path of a group" a stable keep choice across runs.
"""

from __future__ import annotations

from typing import TypeAlias

import hashlib
import logging
from collections import defaultdict
from collections.abc import Callable, Sequence

from result import Err, Ok, Result

from checkup.models.analysis import (
    DuplicateGroup,
    DuplicateReport,
    DuplicateScanError,
    DuplicateScanErrorCode,
    RemovalResult,
)
from checkup.services.fs import DEFAULT_FS, FileInfo, FileSystem

logger = logging.getLogger(__name__)

DEFAULT_MIN_BYTES = 1024 * 1024
DEFAULT_SCALE_GUARD = 5000
_CHUNK = 1024 * 1024

# (files_done, files_total)
Progress: TypeAlias = Callable[[int, int], None]
ConfirmScale: TypeAlias = Callable[[int], bool]


def _is_hidden(info: FileInfo) -> bool:
    return info.name.startswith(".")


def collect_candidates(
    roots: Sequence[str],
    min_bytes: int = DEFAULT_MIN_BYTES,
    fs: FileSystem = DEFAULT_FS,
) -> list[FileInfo]:
    seen: set[str] = set()
    found: list[FileInfo] = []
    for raw in roots:
        root = fs.expanduser(raw)
        if not fs.is_dir(root):
            logger.debug("scan root %s missing, skipped", root)
            continue
        for info in fs.walk_files(root, skip_hidden=True):
            if _is_hidden(info) or info.size < min_bytes or info.path in seen:
                continue
            seen.add(info.path)
            found.append(info)
    return found


def bucket_by_size(files: Sequence[FileInfo]) -> dict[int, list[FileInfo]]:
    by_size: dict[int, list[FileInfo]] = defaultdict(list)
    for info in files:
        by_size[info.size].append(info)
    return {size: group for size, group in by_size.items() if len(group) > 1}


def checksum(path: str, fs: FileSystem = DEFAULT_FS) -> str | None:
    digest = hashlib.md5(usedforsecurity=False)
    try:
        for chunk in fs.read_chunks(path, _CHUNK):
            digest.update(chunk)
    except OSError as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None
    return digest.hexdigest()


def find_duplicates(
    roots: Sequence[str],
    *,
    min_bytes: int = DEFAULT_MIN_BYTES,
    scale_guard: int = DEFAULT_SCALE_GUARD,
    confirm_scale: ConfirmScale | None = None,
    progress: Progress | None = None,
    fs: FileSystem = DEFAULT_FS,
) -> Result[DuplicateReport, DuplicateScanError]:
    if not roots:
        return Err(DuplicateScanError(DuplicateScanErrorCode.NO_ROOTS, "No folders configured to scan."))

    candidates = collect_candidates(roots, min_bytes, fs)
    buckets = bucket_by_size(candidates)
    to_hash = sum(len(group) for group in buckets.values())

    if to_hash > scale_guard:
        if confirm_scale is None or not confirm_scale(to_hash):
            return Err(
                DuplicateScanError(
                    DuplicateScanErrorCode.ABORTED_BY_USER,
                    f"Duplicate scan stopped before checksumming {to_hash} files.",
                    candidates=to_hash,
                )
            )

    # Keyed by (size, digest); dicts keep insertion order, so scan order survives.
    confirmed: dict[tuple[int, str], list[str]] = defaultdict(list)
    done = 0
    for info in candidates:
        if info.size not in buckets:
            continue
        digest = checksum(info.path, fs)
        done += 1
        if progress is not None:
            progress(done, to_hash)
        if digest is None:
            continue
        confirmed[(info.size, digest)].append(info.path)

    groups = tuple(
        DuplicateGroup(size_bytes=size, checksum=digest, paths=tuple(paths))
        for (size, digest), paths in confirmed.items()
        if len(paths) > 1
    )
    return Ok(DuplicateReport(groups=groups, files_considered=len(candidates), files_hashed=done))


def by_wasted_space(groups: Sequence[DuplicateGroup]) -> list[DuplicateGroup]:
    return sorted(groups, key=lambda g: g.wasted_bytes, reverse=True)


def trash_duplicates(groups: Sequence[DuplicateGroup], fs: FileSystem = DEFAULT_FS) -> list[RemovalResult]:
    """Move every non-kept copy to the Trash.  The kept path is never touched."""
    results: list[RemovalResult] = []
    for group in groups:
        for path in group.candidates:
            if not fs.exists(path):
                results.append(RemovalResult(path, False, 0, "already gone"))
                continue
            try:
                fs.move_to_trash(path)
            except OSError as exc:
                logger.warning("Could not move %s to Trash: %s", path, exc)
                results.append(RemovalResult(path, False, 0, str(exc)))
                continue
            results.append(RemovalResult(path, True, group.size_bytes, "moved to Trash"))
    return results
