"""
Runtime interface for recipe validation commands.

A runtime only runs a command and reports how it ended. Deciding what the
exit status means for a recipe is left to ``ValidationRunner``.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass

ABORTED_EXIT_CODE = -2
NOT_RUN_EXIT_CODE = -1

# Receives each stdout line of a running command
OutputCallback = Callable[[str], None]


def elapsed_ms(started_at: float) -> float:
    """Milliseconds since a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - started_at) * 1000


@dataclass
class ExecutionResult:
    """How a validation command ended."""

    exit_code: int
    output: str = ""
    stderr: str = ""
    error: str | None = None
    duration_ms: float = 0.0
    started: bool = True  # False when the shell could not be spawned
    aborted: bool = False  # Killed by the abort signal
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return self.exit_code == 0 and self.started and not (self.aborted or self.timed_out)

    @classmethod
    def success_result(cls, output: str, duration_ms: float = 0.0) -> ExecutionResult:
        return cls(exit_code=0, output=output, duration_ms=duration_ms)

    @classmethod
    def error_result(
        cls,
        error: str,
        exit_code: int = 1,
        output: str = "",
        stderr: str = "",
        duration_ms: float = 0.0,
    ) -> ExecutionResult:
        """The command ran and exited non-zero (or was killed by a signal)."""
        return cls(
            exit_code=exit_code,
            output=output,
            stderr=stderr,
            error=error,
            duration_ms=duration_ms,
        )

    @classmethod
    def aborted_result(cls, output: str = "", duration_ms: float = 0.0) -> ExecutionResult:
        return cls(
            exit_code=ABORTED_EXIT_CODE,
            output=output,
            error="Aborted",
            duration_ms=duration_ms,
            aborted=True,
        )

    @classmethod
    def timeout_result(
        cls, timeout: float, output: str = "", duration_ms: float = 0.0
    ) -> ExecutionResult:
        return cls(
            exit_code=NOT_RUN_EXIT_CODE,
            output=output,
            error=f"Command timed out after {timeout}s",
            duration_ms=duration_ms,
            timed_out=True,
        )

    @classmethod
    def spawn_error_result(cls, error: str, duration_ms: float = 0.0) -> ExecutionResult:
        return cls(
            exit_code=NOT_RUN_EXIT_CODE,
            error=error,
            duration_ms=duration_ms,
            started=False,
        )


class ValidationRuntime(ABC):
    """Runs recipe validation commands somewhere: a local shell, a container, ..."""

    @abstractmethod
    async def execute(
        self,
        command: str,
        cwd: str | None = None,
        env: dict[str, str] | None = None,
        timeout: float | None = None,
        on_output: OutputCallback | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> ExecutionResult:
        """
        Run a validation command to completion.

        Args:
            command: Shell script, possibly multi-line
            cwd: Working directory
            env: Variables added on top of the current environment
            timeout: Seconds before the command is killed (None = no limit)
            on_output: Called with each stdout line as it arrives
            abort_signal: When set, the command is killed and an aborted
                result returned

        If the awaiting task is cancelled, the command is killed before the
        ``CancelledError`` propagates.
        """
        pass
