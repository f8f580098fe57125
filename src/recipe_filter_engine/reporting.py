"""
Status reporting for filter verdicts.

A ``RecipeFilterRunner`` is given a list of ``StatusReporter`` subscribers
and notifies every one of them when a recipe is detected-but-unsupported or
unsupported. Compatible recipes and validation errors are not reported here;
validation errors surface only in the aggregated filter error.

Example:
    counter = CountingStatusReporter()
    runner = RecipeFilterRunner(subscribers=[counter, ConsoleStatusReporter()])
    await runner.evaluate_all(recipes, snapshot)
    print(counter.recipe_detected_call_count)
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.models import ClassificationOutcome, Outcome, RecipeStatusEvent

logger = get_logger("reporting")


class StatusReporter(ABC):
    """Subscriber interface for recipe status notifications."""

    @abstractmethod
    def recipe_detected(self, event: RecipeStatusEvent) -> None:
        """The target software runs on the host but failed validation."""
        pass

    @abstractmethod
    def recipe_unsupported(self, event: RecipeStatusEvent) -> None:
        """The host does not meet the recipe's prerequisites."""
        pass


class CountingStatusReporter(StatusReporter):
    """
    Records notifications and counts them.

    Safe to notify from multiple threads or concurrent tasks.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.recipe_detected_call_count = 0
        self.recipe_unsupported_call_count = 0
        self.detected: list[RecipeStatusEvent] = []
        self.unsupported: list[RecipeStatusEvent] = []

    def recipe_detected(self, event: RecipeStatusEvent) -> None:
        with self._lock:
            self.recipe_detected_call_count += 1
            self.detected.append(event)

    def recipe_unsupported(self, event: RecipeStatusEvent) -> None:
        with self._lock:
            self.recipe_unsupported_call_count += 1
            self.unsupported.append(event)

    def reset(self) -> None:
        with self._lock:
            self.recipe_detected_call_count = 0
            self.recipe_unsupported_call_count = 0
            self.detected.clear()
            self.unsupported.clear()


class LoggingStatusReporter(StatusReporter):
    """Writes notifications to the package logger."""

    def recipe_detected(self, event: RecipeStatusEvent) -> None:
        logger.info("Recipe %s detected but unsupported: %s", event.recipe_name, event.msg)

    def recipe_unsupported(self, event: RecipeStatusEvent) -> None:
        logger.info("Recipe %s unsupported: %s", event.recipe_name, event.msg)


class ConsoleStatusReporter(StatusReporter):
    """Prints notifications to a terminal."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def recipe_detected(self, event: RecipeStatusEvent) -> None:
        self.console.print(
            f"[yellow]![/yellow] {escape(event.recipe.label)} detected but not supported: {escape(event.msg)}"
        )

    def recipe_unsupported(self, event: RecipeStatusEvent) -> None:
        self.console.print(f"[dim]-[/dim] {escape(event.recipe.label)} unsupported: {escape(event.msg)}")


class StatusFanout:
    """Delivers each notification to every subscriber, in registration order."""

    def __init__(self, subscribers: Sequence[StatusReporter] | None = None) -> None:
        self.subscribers: list[StatusReporter] = list(subscribers or [])

    def add(self, subscriber: StatusReporter) -> None:
        self.subscribers.append(subscriber)

    def recipe_detected(self, event: RecipeStatusEvent) -> None:
        for subscriber in self.subscribers:
            try:
                subscriber.recipe_detected(event)
            except Exception:
                logger.exception(
                    "Status reporter %s failed on recipe_detected for %s",
                    type(subscriber).__name__,
                    event.recipe_name,
                )

    def recipe_unsupported(self, event: RecipeStatusEvent) -> None:
        for subscriber in self.subscribers:
            try:
                subscriber.recipe_unsupported(event)
            except Exception:
                logger.exception(
                    "Status reporter %s failed on recipe_unsupported for %s",
                    type(subscriber).__name__,
                    event.recipe_name,
                )


_OUTCOME_STYLES = {
    Outcome.COMPATIBLE: "green",
    Outcome.DETECTED_UNSUPPORTED: "yellow",
    Outcome.UNSUPPORTED: "dim",
    Outcome.VALIDATION_ERROR: "red",
}


def render_outcomes(
    outcomes: Sequence[ClassificationOutcome],
    console: Console | None = None,
) -> None:
    """Print a table of per-recipe verdicts."""
    console = console or Console()
    table = Table(title="Recipe compatibility")
    table.add_column("Recipe", style="cyan")
    table.add_column("Outcome")
    table.add_column("Reason")
    table.add_column("Time", justify="right")

    for item in outcomes:
        style = _OUTCOME_STYLES[item.outcome]
        table.add_row(
            escape(item.recipe.name),
            f"[{style}]{item.outcome.label}[/{style}]",
            escape(item.message),
            f"{item.duration_ms:.0f}ms",
        )

    console.print(table)
