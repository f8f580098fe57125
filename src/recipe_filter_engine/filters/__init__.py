"""
Declarative recipe filters that run before validation commands.
"""

from recipe_filter_engine.filters.base import FilterResult, RecipeFilter
from recipe_filter_engine.filters.process_match import (
    ProcessMatchFilter,
    match_processes,
    matching_processes,
)
from recipe_filter_engine.filters.skip import SkipListFilter

__all__ = [
    "FilterResult",
    "RecipeFilter",
    "ProcessMatchFilter",
    "SkipListFilter",
    "match_processes",
    "matching_processes",
]
