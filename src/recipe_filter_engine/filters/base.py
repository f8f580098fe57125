"""
Base recipe filter interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.models import HostSnapshot, Recipe


@dataclass
class FilterResult:
    """Result of filtering a recipe."""

    recipe: Recipe
    eligible: bool
    reason: str | None = None  # Reason for ineligibility


class RecipeFilter(ABC):
    """
    Abstract base class for cheap, declarative recipe filters.

    Filters run before any validation command is executed. They must be
    pure: no subprocesses, no I/O, no mutation of the recipe or snapshot.
    """

    @abstractmethod
    def filter(
        self,
        recipe: Recipe,
        config: FilterConfig,
        snapshot: HostSnapshot,
    ) -> FilterResult:
        """
        Determine if a recipe may proceed to validation.

        Args:
            recipe: The recipe to check
            config: Filter configuration
            snapshot: Facts about the target host

        Returns:
            FilterResult indicating eligibility
        """
        pass

    def filter_all(
        self,
        recipes: list[Recipe],
        config: FilterConfig,
        snapshot: HostSnapshot,
    ) -> list[FilterResult]:
        """Filter multiple recipes."""
        return [self.filter(recipe, config, snapshot) for recipe in recipes]
