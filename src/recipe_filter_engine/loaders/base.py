"""
Base recipe loader interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.models import Recipe

logger = get_logger("loaders")


class RecipeLoadError(Exception):
    """Raised when a recipe definition cannot be parsed."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        where = f"{path}: " if path is not None else ""
        super().__init__(f"{where}{reason}")


@dataclass
class RecipeEntry:
    """A recipe with its raw definition, or the error that prevented loading it."""

    path: Path
    recipe: Recipe | None = None
    definition: dict[str, Any] = field(default_factory=dict)
    load_error: str | None = None


class RecipeLoader(ABC):
    """
    Abstract base class for recipe loaders.

    Implement this interface to read recipe definitions from other formats
    or sources.
    """

    @abstractmethod
    def can_load(self, path: Path) -> bool:
        """Check if this loader can handle the given file."""
        pass

    @abstractmethod
    def load_recipe(self, path: Path) -> Recipe:
        """
        Load a recipe from a file.

        Raises:
            RecipeLoadError: If the file is not a valid recipe definition.
        """
        pass

    def load_entry(self, path: Path) -> RecipeEntry:
        """Load a recipe, capturing the error instead of raising."""
        try:
            return RecipeEntry(path=path, recipe=self.load_recipe(path))
        except RecipeLoadError as e:
            return RecipeEntry(path=path, load_error=e.reason)

    def load_directory(self, directory: Path, recursive: bool = True) -> list[RecipeEntry]:
        """
        Load all recipes from a directory.

        Files are visited in sorted path order so results are stable.

        Args:
            directory: Directory to scan
            recursive: Whether to scan subdirectories
        """
        if not directory.exists():
            return []

        candidates = directory.rglob("*") if recursive else directory.glob("*")
        return [
            self.load_entry(path)
            for path in sorted(candidates)
            if path.is_file() and self.can_load(path)
        ]

    def load_recipes(self, directories: list[Path], recursive: bool = True) -> list[Recipe]:
        """
        Load recipes from several directories with precedence.

        Later directories override earlier ones for recipes with the same name.
        Recipes that fail to load are logged and left out.
        """
        merged: dict[str, Recipe] = {}
        for directory in directories:
            logger.debug("Scanning directory: %s", directory)
            for entry in self.load_directory(directory, recursive):
                if entry.recipe is None:
                    logger.warning("Failed to load recipe %s: %s", entry.path, entry.load_error)
                    continue
                if entry.recipe.name in merged:
                    logger.debug("Overriding recipe: %s", entry.recipe.name)
                merged[entry.recipe.name] = entry.recipe
        return list(merged.values())
