from __future__ import annotations

from typing import TypeAlias

import logging
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from result import Err, Ok, Result

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


@dataclass(slots=True, frozen=True)
class CommandOutput:
    stdout: str
    stderr: str
    returncode: int


class CommandErrorCode(str, Enum):
    NOT_FOUND = "not_found"
    TIMEOUT = "timeout"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class CommandError:
    code: CommandErrorCode
    argv: tuple[str, ...]
    message: str


CommandResult: TypeAlias = Result[CommandOutput, CommandError]


class CommandRunner:
    """Thin wrapper around ``subprocess.run`` that reports failures as values."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def run(
        self,
        argv: Sequence[str],
        timeout: float | None = None,
        check: bool = True,
    ) -> CommandResult:
        args = tuple(argv)
        logger.debug("running %s", " ".join(args))
        try:
            completed = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout if timeout is not None else self.timeout,
                check=False,
            )
        except FileNotFoundError:
            return Err(CommandError(CommandErrorCode.NOT_FOUND, args, f"{args[0]}: command not found"))
        except subprocess.TimeoutExpired:
            return Err(CommandError(CommandErrorCode.TIMEOUT, args, f"{args[0]} timed out"))
        except OSError as exc:
            return Err(CommandError(CommandErrorCode.FAILED, args, str(exc)))

        output = CommandOutput(completed.stdout or "", completed.stderr or "", completed.returncode)
        if check and completed.returncode != 0:
            detail = output.stderr.strip() or f"exit status {completed.returncode}"
            return Err(CommandError(CommandErrorCode.FAILED, args, detail))
        return Ok(output)


DEFAULT_RUNNER = CommandRunner()
