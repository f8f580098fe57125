"""
External validation of recipes.

Runs a recipe's ``require_at_discovery`` command with the host facts in its
environment and classifies the exit status:

    0                    compatible
    DETECTED_EXIT_CODE   detected: the software runs here but fails a
                         stricter requirement
    any other non-zero   unsupported
    spawn failure/timeout error (the check itself broke)
    abort/cancellation   cancelled
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.filters.process_match import matching_processes
from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.models import HostSnapshot, Recipe
from recipe_filter_engine.runtime import BashRuntime, ExecutionResult, ValidationRuntime

logger = get_logger("validation")


class ValidationStatus(str, Enum):
    COMPATIBLE = "compatible"
    DETECTED = "detected"
    UNSUPPORTED = "unsupported"
    ERROR = "error"
    CANCELLED = "cancelled"


@dataclass
class ValidationResult:
    """Classified result of one validation command."""

    status: ValidationStatus
    exit_code: int | None = None
    output: str = ""
    error: str = ""
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.status is ValidationStatus.COMPATIBLE


def classify_exit_code(exit_code: int, detected_exit_code: int) -> ValidationStatus:
    """Map the exit code of a command that ran to completion."""
    if exit_code == 0:
        return ValidationStatus.COMPATIBLE
    if exit_code == detected_exit_code:
        return ValidationStatus.DETECTED
    return ValidationStatus.UNSUPPORTED


def build_host_env(
    snapshot: HostSnapshot,
    recipe: Recipe | None = None,
    extra: dict[str, str] | None = None,
) -> dict[str, str]:
    """Environment variables describing the host to a validation command."""
    env = {
        "HOST_OS": snapshot.os,
        "HOST_PLATFORM": snapshot.platform,
        "HOST_PLATFORM_FAMILY": snapshot.platform_family,
        "HOST_PLATFORM_VERSION": snapshot.platform_version,
        "HOST_KERNEL_ARCH": snapshot.kernel_arch,
        "HOST_KERNEL_VERSION": snapshot.kernel_version,
        "HOST_HOSTNAME": snapshot.hostname,
        "HOST_PROCESS_NAMES": "\n".join(p.name for p in snapshot.processes),
        "HOST_MATCHED_PIDS": "",
        "RECIPE_NAME": "",
    }
    if recipe is not None:
        matched = matching_processes(recipe.process_match, snapshot.processes)
        env["HOST_MATCHED_PIDS"] = ",".join(str(p.pid) for p in matched)
        env["RECIPE_NAME"] = recipe.name
    if extra:
        env.update(extra)
    return env


class ValidationRunner:
    """
    Runs validation commands through a runtime and classifies the result.

    The runner has no timeout of its own unless one is configured; the
    caller bounds execution with ``abort_signal`` or task cancellation.
    """

    def __init__(
        self,
        config: FilterConfig | None = None,
        runtime: ValidationRuntime | None = None,
    ) -> None:
        self.config = config or FilterConfig()
        self.runtime = runtime or BashRuntime(
            shell=self.config.shell,
            max_output_size=self.config.max_output_size,
        )

    async def run(
        self,
        command: str,
        snapshot: HostSnapshot,
        recipe: Recipe | None = None,
        abort_signal: asyncio.Event | None = None,
    ) -> ValidationResult:
        """
        Run a validation command against the host context.

        Args:
            command: Shell command; empty means no validation is declared
            snapshot: Host facts exported to the command's environment
            recipe: Recipe being validated, used for RECIPE_NAME and matched pids
            abort_signal: When set, the command is killed and CANCELLED returned

        Raises:
            asyncio.CancelledError: If the awaiting task is cancelled. The
                command has been killed by then.
        """
        if not command.strip():
            return ValidationResult(status=ValidationStatus.COMPATIBLE)

        name = recipe.name if recipe is not None else "<adhoc>"
        logger.debug("Validating %s: %s", name, command[:100])

        result = await self.runtime.execute(
            command,
            env=build_host_env(snapshot, recipe, self.config.extra_env),
            timeout=self.config.validation_timeout_seconds,
            on_output=lambda line: logger.debug("[%s] %s", name, line.rstrip()),
            abort_signal=abort_signal,
        )
        classified = self.classify(result)
        logger.debug(
            "Validation of %s finished: %s (exit_code=%s, %.0fms)",
            name,
            classified.status.value,
            classified.exit_code,
            classified.duration_ms,
        )
        return classified

    def classify(self, result: ExecutionResult) -> ValidationResult:
        """Turn a raw execution result into a validation status."""
        if result.aborted:
            return ValidationResult(
                status=ValidationStatus.CANCELLED,
                output=result.output,
                error="validation cancelled",
                duration_ms=result.duration_ms,
            )
        if not result.started or result.timed_out:
            return ValidationResult(
                status=ValidationStatus.ERROR,
                output=result.output,
                error=result.error or "validation command failed to run",
                duration_ms=result.duration_ms,
            )
        if result.exit_code < 0:
            # Negative return codes mean the process was killed by a signal.
            return ValidationResult(
                status=ValidationStatus.ERROR,
                exit_code=result.exit_code,
                output=result.output,
                error=f"validation command killed by signal {-result.exit_code}",
                duration_ms=result.duration_ms,
            )

        status = classify_exit_code(result.exit_code, self.config.detected_exit_code)
        return ValidationResult(
            status=status,
            exit_code=result.exit_code,
            output=result.output,
            error="" if status is ValidationStatus.COMPATIBLE else result.stderr,
            duration_ms=result.duration_ms,
        )
