"""Selection grammar shared by every "pick items from a numbered list" prompt.

    all | a            every item
    skip | s | <empty> nothing
    2,5 9              1-based indices, separated by commas and/or spaces
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

logger = logging.getLogger(__name__)

_ALL_TOKENS = frozenset({"all", "a"})
_SKIP_TOKENS = frozenset({"", "skip", "s"})
_SEPARATORS = re.compile(r"[,\s]+")


@dataclass(slots=True, frozen=True)
class Selection:
    numbers: tuple[int, ...]
    rejected: tuple[str, ...] = ()
    skipped: bool = False

    @property
    def indices(self) -> tuple[int, ...]:
        return tuple(n - 1 for n in self.numbers)


def parse_selection(text: str | None, count: int) -> Selection:
    raw = (text or "").strip().lower()
    if raw in _SKIP_TOKENS:
        return Selection(numbers=(), skipped=True)
    if raw in _ALL_TOKENS:
        return Selection(numbers=tuple(range(1, count + 1)))

    numbers: list[int] = []
    rejected: list[str] = []
    for token in _SEPARATORS.split(raw):
        if not token:
            continue
        if not (token.isascii() and token.isdecimal()) or not 1 <= int(token) <= count:
            logger.debug("Ignoring selection %r: expected a number from 1 to %d", token, count)
            rejected.append(token)
            continue
        value = int(token)
        if value not in numbers:
            numbers.append(value)
    return Selection(numbers=tuple(numbers), rejected=tuple(rejected))
