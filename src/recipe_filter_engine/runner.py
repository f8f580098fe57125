"""
Recipe filter runner.

Decides, for each recipe in a set, whether it should be attempted on a host:

1. host validators (e.g. minimum Windows version) reject the whole host,
2. declarative filters (skip list, process match) reject without running
   anything,
3. the recipe's validation command is run and its exit status classified.

Every recipe gets exactly one ``ClassificationOutcome``. Rejections are
reported to the status subscribers and aggregated into a single
``RecipeFilterError``; they never stop the remaining recipes from being
evaluated. Only cancellation ends a run early.

Example:
    runner = RecipeFilterRunner(subscribers=[ConsoleStatusReporter()])
    report = await runner.evaluate_all(recipes, snapshot)
    for recipe in report.compatible_recipes:
        ...
    report.raise_for_errors()
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.filters import ProcessMatchFilter, RecipeFilter, SkipListFilter
from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.models import (
    ClassificationOutcome,
    HostSnapshot,
    Outcome,
    Recipe,
    RecipeStatusEvent,
)
from recipe_filter_engine.reporting import StatusFanout, StatusReporter
from recipe_filter_engine.validation import ValidationResult, ValidationRunner, ValidationStatus
from recipe_filter_engine.validators import HostValidator, OsWindowsValidator, validate_host

logger = get_logger("runner")


class RecipeFilterError(Exception):
    """Raised when one or more recipes were excluded by the filter."""

    def __init__(self, outcomes: Sequence[ClassificationOutcome], total: int | None = None) -> None:
        self.outcomes = list(outcomes)
        self.total = total if total is not None else len(self.outcomes)
        super().__init__(self._format())

    @property
    def recipe_names(self) -> list[str]:
        return [o.recipe.name for o in self.outcomes]

    def _format(self) -> str:
        noun = "recipe" if self.total == 1 else "recipes"
        lines = [f"{len(self.outcomes)} of {self.total} {noun} excluded:"]
        lines.extend(f"  {o.describe()}" for o in self.outcomes)
        return "\n".join(lines)


class FilterCancelledError(Exception):
    """Raised when a filter run is aborted before every recipe was evaluated."""

    pass


@dataclass
class FilterReport:
    """Outcomes of one filter run, in recipe input order."""

    outcomes: list[ClassificationOutcome] = field(default_factory=list)

    @property
    def excluded(self) -> list[ClassificationOutcome]:
        return [o for o in self.outcomes if not o.is_compatible]

    @property
    def compatible_recipes(self) -> list[Recipe]:
        return [o.recipe for o in self.outcomes if o.is_compatible]

    @property
    def ok(self) -> bool:
        return not self.excluded

    @property
    def error(self) -> RecipeFilterError | None:
        """The aggregated error, or None if every recipe is compatible."""
        excluded = self.excluded
        if not excluded:
            return None
        return RecipeFilterError(excluded, total=len(self.outcomes))

    def raise_for_errors(self) -> None:
        error = self.error
        if error is not None:
            raise error

    def by_outcome(self, outcome: Outcome) -> list[ClassificationOutcome]:
        return [o for o in self.outcomes if o.outcome is outcome]

    def get(self, recipe_name: str) -> ClassificationOutcome | None:
        for item in self.outcomes:
            if item.recipe.name == recipe_name:
                return item
        return None


class RecipeFilterRunner:
    """
    Evaluates recipes against a host snapshot.

    Args:
        subscribers: Status reporters notified of detected/unsupported recipes
        config: Filter configuration
        validation_runner: Runs validation commands (built from config if omitted)
        host_validators: Host-wide checks (defaults to the Windows version check)
        filters: Declarative filters (defaults to skip list, then process match)
    """

    def __init__(
        self,
        subscribers: Sequence[StatusReporter] | None = None,
        config: FilterConfig | None = None,
        validation_runner: ValidationRunner | None = None,
        host_validators: Sequence[HostValidator] | None = None,
        filters: Sequence[RecipeFilter] | None = None,
    ) -> None:
        self.config = config or FilterConfig()
        self.status = StatusFanout(subscribers)
        self.validation_runner = validation_runner or ValidationRunner(self.config)
        self.host_validators: list[HostValidator] = (
            list(host_validators) if host_validators is not None else [OsWindowsValidator()]
        )
        self.filters: list[RecipeFilter] = (
            list(filters) if filters is not None else [SkipListFilter(), ProcessMatchFilter()]
        )
        self._active_signals: set[asyncio.Event] = set()

    # ------------------------------------------------------------------
    # Abort control
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return bool(self._active_signals)

    def abort(self) -> None:
        """
        Abort the runs in progress.

        Running validation commands are killed and ``evaluate_all`` raises
        ``FilterCancelledError``. Runs started afterwards are unaffected.
        Runs given their own ``abort_signal`` are stopped through that
        signal only.
        """
        for signal in list(self._active_signals):
            signal.set()

    @contextmanager
    def _run_signal(self, abort_signal: asyncio.Event | None) -> Iterator[asyncio.Event]:
        """Yield the caller's signal, or a fresh one that ``abort()`` can set."""
        if abort_signal is not None:
            yield abort_signal
            return
        signal = asyncio.Event()
        self._active_signals.add(signal)
        try:
            yield signal
        finally:
            self._active_signals.discard(signal)

    # ------------------------------------------------------------------
    # Single recipe
    # ------------------------------------------------------------------

    async def evaluate(
        self,
        recipe: Recipe,
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> ClassificationOutcome:
        """Classify one recipe and notify subscribers of a rejection."""
        with self._run_signal(abort_signal) as signal:
            outcome = await self._classify(recipe, snapshot, signal)
        logger.debug(
            "Recipe %s: %s%s",
            recipe.name,
            outcome.outcome.value,
            f" ({outcome.message})" if outcome.message else "",
        )
        self._report(outcome)
        return outcome

    async def run_filter(
        self,
        recipe: Recipe,
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> None:
        """Raise ``RecipeFilterError`` unless the recipe is compatible."""
        outcome = await self.evaluate(recipe, snapshot, abort_signal)
        if not outcome.is_compatible:
            raise RecipeFilterError([outcome])

    async def _classify(
        self,
        recipe: Recipe,
        snapshot: HostSnapshot,
        signal: asyncio.Event,
    ) -> ClassificationOutcome:
        if signal.is_set():
            return _cancelled(recipe)

        host_messages = validate_host(snapshot, self.host_validators)
        if host_messages:
            return ClassificationOutcome(
                recipe=recipe,
                outcome=Outcome.UNSUPPORTED,
                message="; ".join(host_messages),
            )

        for recipe_filter in self.filters:
            result = recipe_filter.filter(recipe, self.config, snapshot)
            if not result.eligible:
                return ClassificationOutcome(
                    recipe=recipe,
                    outcome=Outcome.UNSUPPORTED,
                    message=result.reason or "filtered out",
                )

        validation = await self.validation_runner.run(
            recipe.validation_command,
            snapshot,
            recipe=recipe,
            abort_signal=signal,
        )
        return _to_outcome(recipe, validation)

    def _report(self, outcome: ClassificationOutcome) -> None:
        if outcome.outcome is Outcome.DETECTED_UNSUPPORTED:
            self.status.recipe_detected(_status_event(outcome))
        elif outcome.outcome is Outcome.UNSUPPORTED:
            self.status.recipe_unsupported(_status_event(outcome))

    # ------------------------------------------------------------------
    # Recipe sets
    # ------------------------------------------------------------------

    async def evaluate_all(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> FilterReport:
        """
        Classify every recipe.

        Recipes are evaluated in order, or concurrently when
        ``config.concurrent`` is set. The report lists outcomes in input
        order either way.

        Raises:
            FilterCancelledError: If the abort signal fired before every recipe
                was evaluated. A run that completed keeps its report.
            asyncio.CancelledError: If the calling task was cancelled. Any
                running validation command has been killed by then.
        """
        with self._run_signal(abort_signal) as signal:
            if signal.is_set():
                raise FilterCancelledError("Recipe filtering aborted before it started")

            logger.debug(
                "Filtering %d recipes (concurrent=%s)", len(recipes), self.config.concurrent
            )
            if self.config.concurrent and len(recipes) > 1:
                outcomes = await self._evaluate_concurrently(recipes, snapshot, signal)
            else:
                outcomes = await self._evaluate_sequentially(recipes, snapshot, signal)

        if any(o is None or o.cancelled for o in outcomes):
            done = sum(1 for o in outcomes if o is not None and not o.cancelled)
            raise FilterCancelledError(
                f"Recipe filtering aborted after {done} of {len(recipes)} recipes"
            )

        report = FilterReport(outcomes=[o for o in outcomes if o is not None])
        logger.info(
            "Filtered %d recipes: %d compatible, %d excluded",
            len(report.outcomes),
            len(report.compatible_recipes),
            len(report.excluded),
        )
        return report

    async def _evaluate_sequentially(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        signal: asyncio.Event,
    ) -> list[ClassificationOutcome | None]:
        outcomes: list[ClassificationOutcome | None] = [None] * len(recipes)
        for index, recipe in enumerate(recipes):
            if signal.is_set():
                break
            outcomes[index] = await self.evaluate(recipe, snapshot, signal)
        return outcomes

    async def _evaluate_concurrently(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        signal: asyncio.Event,
    ) -> list[ClassificationOutcome | None]:
        outcomes: list[ClassificationOutcome | None] = [None] * len(recipes)
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent))

        async def _evaluate_one(index: int, recipe: Recipe) -> None:
            async with semaphore:
                if signal.is_set():
                    return
                outcomes[index] = await self.evaluate(recipe, snapshot, signal)

        tasks = [
            asyncio.create_task(_evaluate_one(index, recipe))
            for index, recipe in enumerate(recipes)
        ]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            # Wait for every task so their processes are reaped before propagating.
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        return outcomes

    async def confirm_compatible_recipes(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> None:
        """Raise the aggregated ``RecipeFilterError`` unless every recipe is compatible."""
        report = await self.evaluate_all(recipes, snapshot, abort_signal)
        report.raise_for_errors()

    async def filter_recipes(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> list[Recipe]:
        """Return only the recipes that may be installed on this host."""
        report = await self.evaluate_all(recipes, snapshot, abort_signal)
        return report.compatible_recipes


def _cancelled(recipe: Recipe, duration_ms: float = 0.0) -> ClassificationOutcome:
    return ClassificationOutcome(
        recipe=recipe,
        outcome=Outcome.VALIDATION_ERROR,
        message="validation cancelled",
        cancelled=True,
        duration_ms=duration_ms,
    )


def _to_outcome(recipe: Recipe, validation: ValidationResult) -> ClassificationOutcome:
    status = validation.status
    if status is ValidationStatus.COMPATIBLE:
        return ClassificationOutcome.compatible(recipe, duration_ms=validation.duration_ms)
    if status is ValidationStatus.CANCELLED:
        return _cancelled(recipe, duration_ms=validation.duration_ms)
    if status is ValidationStatus.ERROR:
        logger.warning("Validation of %s could not run: %s", recipe.name, validation.error)
        return ClassificationOutcome(
            recipe=recipe,
            outcome=Outcome.VALIDATION_ERROR,
            message=validation.error,
            exit_code=validation.exit_code,
            duration_ms=validation.duration_ms,
        )
    if status is ValidationStatus.DETECTED:
        product = recipe.first_name or recipe.name
        message = f"{product} was detected but did not pass validation"
        outcome = Outcome.DETECTED_UNSUPPORTED
    else:
        message = f"validation exited with code {validation.exit_code}"
        outcome = Outcome.UNSUPPORTED
    if validation.error:
        message = f"{message}: {validation.error}"
    return ClassificationOutcome(
        recipe=recipe,
        outcome=outcome,
        message=message,
        exit_code=validation.exit_code,
        duration_ms=validation.duration_ms,
    )


def _status_event(outcome: ClassificationOutcome) -> RecipeStatusEvent:
    return RecipeStatusEvent(
        recipe=outcome.recipe,
        msg=outcome.message,
        validation_duration_ms=outcome.duration_ms,
    )
