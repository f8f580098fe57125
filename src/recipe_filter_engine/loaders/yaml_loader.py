"""
YAML recipe loader.

Recipe files look like this (fields the filter does not use, such as the
install steps, are ignored):

```yaml
name: apache-open-source-integration
displayName: Apache Integration
description: Apache web server monitoring
repository: https://github.com/newrelic/nri-apache
installTargets:
  - type: host
    os: linux
keywords:
  - Apache
processMatch:
  - apache2
  - httpd
preInstall:
  info: Apache status module must be enabled
  requireAtDiscovery: |
    curl -fs http://127.0.0.1/server-status?auto > /dev/null || exit 132
```
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from recipe_filter_engine.loaders.base import RecipeLoader, RecipeLoadError
from recipe_filter_engine.models import InstallTarget, PreInstallConfig, Recipe

RECIPE_SUFFIXES = (".yml", ".yaml")


class YamlRecipeLoader(RecipeLoader):
    """Loads recipes from ``.yml``/``.yaml`` files."""

    def can_load(self, path: Path) -> bool:
        return path.suffix.lower() in RECIPE_SUFFIXES

    def load_recipe(self, path: Path) -> Recipe:
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise RecipeLoadError(path, f"cannot read file: {e}") from e
        return self.parse(content, path)

    def parse(self, content: str, path: Path | None = None) -> Recipe:
        """Parse a recipe from YAML text."""
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise RecipeLoadError(path, f"invalid YAML: {e}") from e
        if not isinstance(data, dict):
            raise RecipeLoadError(path, "recipe must be a mapping")
        return self.from_dict(data, path)

    def from_dict(self, data: dict[str, Any], path: Path | None = None) -> Recipe:
        name = data.get("name")
        if not name or not isinstance(name, str):
            raise RecipeLoadError(path, "recipe has no name")

        pre_install_raw = data.get("preInstall", data.get("pre_install")) or {}
        if not isinstance(pre_install_raw, dict):
            raise RecipeLoadError(path, "preInstall must be a mapping")

        targets_raw = data.get("installTargets", data.get("install_targets")) or []
        return Recipe(
            name=name,
            display_name=str(data.get("displayName", data.get("display_name", "")) or ""),
            description=str(data.get("description", "") or ""),
            repository=str(data.get("repository", "") or ""),
            process_match=self._ensure_list(data.get("processMatch", data.get("process_match"))),
            pre_install=PreInstallConfig(
                require_at_discovery=str(
                    pre_install_raw.get(
                        "requireAtDiscovery", pre_install_raw.get("require_at_discovery", "")
                    )
                    or ""
                ),
                info=str(pre_install_raw.get("info", "") or ""),
            ),
            install_targets=[
                self._parse_install_target(target)
                for target in targets_raw
                if isinstance(target, dict)
            ],
            keywords=self._ensure_list(data.get("keywords")),
        )

    def _parse_install_target(self, target: dict[str, Any]) -> InstallTarget:
        return InstallTarget(
            type=str(target.get("type", "") or ""),
            os=str(target.get("os", "") or ""),
            platform=str(target.get("platform", "") or ""),
            platform_family=str(target.get("platformFamily", "") or ""),
            platform_version=str(target.get("platformVersion", "") or ""),
            kernel_arch=str(target.get("kernelArch", "") or ""),
        )

    @staticmethod
    def _ensure_list(value: Any) -> list[str]:
        """Ensure value is a list of strings."""
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        if isinstance(value, list):
            return [str(v) for v in value]
        return []
