"""
Process match filter.

A recipe that declares process-match patterns only applies to hosts where
at least one pattern is found in at least one discovered process.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.filters.base import FilterResult, RecipeFilter
from recipe_filter_engine.models import DiscoveredProcess, HostSnapshot, Recipe


def _process_matches(pattern: str, process: DiscoveredProcess) -> bool:
    return pattern in process.name or pattern in process.cmdline


def matching_processes(
    patterns: Sequence[str],
    processes: Iterable[DiscoveredProcess],
) -> list[DiscoveredProcess]:
    """Return the processes matched by any pattern, in discovery order."""
    active = [p for p in patterns if p]
    return [proc for proc in processes if any(_process_matches(p, proc) for p in active)]


def match_processes(
    patterns: Sequence[str],
    processes: Iterable[DiscoveredProcess],
) -> bool:
    """
    Check whether any pattern matches any process name or command line.

    Matching is a case-sensitive substring test (an exact match is a
    substring too). No patterns means no process constraint, so the result
    is True. Empty pattern strings are ignored.
    """
    if not any(patterns):
        return True
    return bool(matching_processes(patterns, processes))


class ProcessMatchFilter(RecipeFilter):
    """Rejects recipes whose target software is not running on the host."""

    def filter(
        self,
        recipe: Recipe,
        config: FilterConfig,
        snapshot: HostSnapshot,
    ) -> FilterResult:
        if match_processes(recipe.process_match, snapshot.processes):
            return FilterResult(recipe=recipe, eligible=True)
        return FilterResult(
            recipe=recipe,
            eligible=False,
            reason=f"no running process matches {recipe.process_match}",
        )
