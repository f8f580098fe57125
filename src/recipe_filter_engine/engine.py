"""
Main recipe filter engine.

Provides a high-level API for loading recipes and host snapshots from disk
and filtering the recipes against the host.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from pathlib import Path

import yaml

from recipe_filter_engine.config import FilterConfig
from recipe_filter_engine.loaders import RecipeLoader, YamlRecipeLoader
from recipe_filter_engine.logging import get_logger
from recipe_filter_engine.models import HostSnapshot, Recipe
from recipe_filter_engine.reporting import StatusReporter
from recipe_filter_engine.runner import FilterReport, RecipeFilterRunner

logger = get_logger("engine")


class RecipeFilterEngine:
    """
    Unified API for recipe filtering.

    Example:
        engine = RecipeFilterEngine(
            config=FilterConfig(concurrent=True),
            subscribers=[ConsoleStatusReporter()],
        )

        recipes = engine.load_recipes([Path("./recipes")])
        snapshot = engine.load_snapshot(Path("host.yml"))

        report = await engine.filter(recipes, snapshot)
        report.raise_for_errors()
    """

    def __init__(
        self,
        config: FilterConfig | None = None,
        loader: RecipeLoader | None = None,
        subscribers: Sequence[StatusReporter] | None = None,
        runner: RecipeFilterRunner | None = None,
    ) -> None:
        self.config = config or FilterConfig()
        self.loader = loader or YamlRecipeLoader()
        self.runner = runner or RecipeFilterRunner(subscribers=subscribers, config=self.config)

    def load_recipes(self, directories: list[Path]) -> list[Recipe]:
        """
        Load recipes from directories, later directories overriding earlier ones.

        Files that fail to parse are logged and skipped.
        """
        recipes = self.loader.load_recipes(directories)
        logger.info("Loaded %d recipes", len(recipes))
        return recipes

    def load_snapshot(self, path: Path) -> HostSnapshot:
        """Load a host snapshot from a YAML or JSON file."""
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                data = yaml.safe_load(f)
        return HostSnapshot.from_dict(data or {})

    async def filter(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> FilterReport:
        """Classify every recipe against the host."""
        return await self.runner.evaluate_all(recipes, snapshot, abort_signal)

    async def compatible_recipes(
        self,
        recipes: Sequence[Recipe],
        snapshot: HostSnapshot,
        abort_signal: asyncio.Event | None = None,
    ) -> list[Recipe]:
        """Return only the recipes that may be installed on this host."""
        return await self.runner.filter_recipes(recipes, snapshot, abort_signal)

    def abort(self) -> None:
        """
        Abort the runs in progress, killing any running validation command.

        Later calls to ``filter`` start with a fresh abort signal.
        """
        self.runner.abort()
