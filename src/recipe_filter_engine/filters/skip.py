"""
Skip list filter: recipes the operator asked not to install.
"""

from __future__ import annotations

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.filters.base import FilterResult, RecipeFilter
from recipe_filter_engine.models import HostSnapshot, Recipe


class SkipListFilter(RecipeFilter):
    def filter(
        self,
        recipe: Recipe,
        config: FilterConfig,
        snapshot: HostSnapshot,
    ) -> FilterResult:
        if config.is_skipped(recipe.name):
            return FilterResult(
                recipe=recipe,
                eligible=False,
                reason=f"recipe '{recipe.name}' is skipped by configuration",
            )
        return FilterResult(recipe=recipe, eligible=True)
