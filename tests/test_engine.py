"""Tests for the high-level engine."""

import asyncio
import json
from pathlib import Path
from textwrap import dedent

import pytest

from recipe_filter_engine import (
    CountingStatusReporter,
    FilterCancelledError,
    FilterConfig,
    HostSnapshot,
    Outcome,
    PreInstallConfig,
    Recipe,
    RecipeFilterEngine,
)


class TestRecipeFilterEngine:
    def test_load_recipes_skips_broken_files(
        self, recipe_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        engine = RecipeFilterEngine()

        recipes = engine.load_recipes([recipe_dir])

        assert sorted(r.name for r in recipes) == [
            "apache-open-source-integration",
            "mysql-open-source-integration",
        ]
        assert "Failed to load recipe" in caplog.text

    def test_load_snapshot_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "host.yml"
        path.write_text(
            dedent("""
            os: linux
            platformVersion: "22.04"
            processes:
              - name: apache2
                cmdline: /usr/sbin/apache2 -k start
                pid: 100
            """)
        )

        snapshot = RecipeFilterEngine().load_snapshot(path)

        assert snapshot.os == "linux"
        assert snapshot.processes[0].pid == 100

    def test_load_snapshot_json(self, tmp_path: Path) -> None:
        path = tmp_path / "host.json"
        path.write_text(json.dumps({"os": "windows", "platformVersion": "6.1"}))

        snapshot = RecipeFilterEngine().load_snapshot(path)

        assert snapshot.platform_version == "6.1"

    @pytest.mark.asyncio
    async def test_filter_loaded_recipes(self, recipe_dir: Path, tmp_path: Path) -> None:
        host = tmp_path / "host.yml"
        host.write_text("os: linux\nprocesses: [apache2, mysqld]\n")
        reporter = CountingStatusReporter()
        engine = RecipeFilterEngine(subscribers=[reporter])

        recipes = engine.load_recipes([recipe_dir])
        report = await engine.filter(recipes, engine.load_snapshot(host))

        assert report.get("apache-open-source-integration").is_compatible
        assert report.get("mysql-open-source-integration").outcome is Outcome.UNSUPPORTED
        assert reporter.recipe_unsupported_call_count == 1

    @pytest.mark.asyncio
    async def test_compatible_recipes_with_skip(self, recipe_dir: Path, tmp_path: Path) -> None:
        host = tmp_path / "host.yml"
        host.write_text("os: linux\nprocesses: [apache2]\n")
        engine = RecipeFilterEngine(
            config=FilterConfig(skip_recipes=["apache-open-source-integration"])
        )

        compatible = await engine.compatible_recipes(
            engine.load_recipes([recipe_dir]), engine.load_snapshot(host)
        )

        assert compatible == []

    def test_load_recipes_later_directory_wins(self, recipe_dir: Path, tmp_path: Path) -> None:
        override_dir = tmp_path / "overrides"
        override_dir.mkdir()
        (override_dir / "apache.yml").write_text(
            "name: apache-open-source-integration\ndisplayName: Apache Override\n"
        )

        recipes = RecipeFilterEngine().load_recipes([recipe_dir, override_dir])
        by_name = {r.name: r for r in recipes}

        assert by_name["apache-open-source-integration"].display_name == "Apache Override"
        assert by_name["apache-open-source-integration"].process_match == []

    @pytest.mark.asyncio
    async def test_filter_again_after_abort(self) -> None:
        engine = RecipeFilterEngine()
        slow = Recipe(name="slow", pre_install=PreInstallConfig(require_at_discovery="sleep 30"))
        asyncio.get_running_loop().call_later(0.2, engine.abort)

        with pytest.raises(FilterCancelledError):
            await engine.filter([slow], HostSnapshot())

        report = await engine.filter([Recipe(name="b")], HostSnapshot())
        assert report.ok
