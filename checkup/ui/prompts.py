from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import Protocol

from typing_extensions import override

from rich.console import Console
from rich.prompt import Confirm, Prompt

logger = logging.getLogger(__name__)


class Prompter(Protocol):
    def ask(self, text: str) -> str: ...

    def confirm(self, text: str) -> bool: ...


class RichPrompter:
    def __init__(self, console: Console) -> None:
        self.console = console

    def ask(self, text: str) -> str:
        return Prompt.ask(text, console=self.console, default="", show_default=False)

    def confirm(self, text: str) -> bool:
        return Confirm.ask(text, console=self.console, default=False)


class ScriptedPrompter(RichPrompter):
    """Answers prompts from a fixed script; an exhausted script skips / declines.

    Used for unattended runs (``--answers "1,3;y;skip"``) and in tests.
    """

    def __init__(self, answers: Iterable[str], console: Console | None = None) -> None:
        super().__init__(console or Console(quiet=True))
        self._answers = deque(answers)
        self.asked: list[str] = []

    @classmethod
    def from_string(cls, script: str, console: Console | None = None) -> ScriptedPrompter:
        return cls([part.strip() for part in script.split(";")] if script else [], console)

    def _next(self, text: str) -> str:
        self.asked.append(text)
        answer = self._answers.popleft() if self._answers else ""
        logger.debug("scripted answer to %r: %r", text, answer)
        self.console.print(f"{text} [dim]{answer or '(no answer)'}[/dim]")
        return answer

    @override
    def ask(self, text: str) -> str:
        return self._next(text)

    @override
    def confirm(self, text: str) -> bool:
        return self._next(text).strip().lower() in {"y", "yes"}
