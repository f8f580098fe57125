"""
Recipe loaders for different file formats and sources.
"""

from recipe_filter_engine.loaders.base import RecipeEntry, RecipeLoader, RecipeLoadError
from recipe_filter_engine.loaders.yaml_loader import YamlRecipeLoader

__all__ = ["RecipeEntry", "RecipeLoader", "RecipeLoadError", "YamlRecipeLoader"]
