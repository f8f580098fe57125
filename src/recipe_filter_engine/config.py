"""
Configuration for the recipe filter engine.

Configuration can be loaded from YAML/JSON-shaped dicts, from a YAML file,
or from ``RFE_*`` environment variables (optionally read from a ``.env``
file), or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Exit code a validation command uses to say "the software is running here,
# but this host fails a stricter requirement".
DETECTED_EXIT_CODE = 132

ENV_PREFIX = "RFE_"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class FilterConfig:
    """
    Main configuration for recipe filtering.

    Example YAML:
        detected_exit_code: 132
        shell: /bin/bash
        validation_timeout_seconds: 60
        concurrent: true
        max_concurrent: 4
        skip_recipes:
          - infra-agent-installer
        extra_env:
          NEW_RELIC_REGION: US
    """

    # Validation
    detected_exit_code: int = DETECTED_EXIT_CODE
    shell: str = "/bin/bash"
    validation_timeout_seconds: float | None = None  # None = bounded by caller only
    max_output_size: int = 1_000_000  # 1MB
    extra_env: dict[str, str] = field(default_factory=dict)

    # Scheduling
    concurrent: bool = False
    max_concurrent: int = 5

    # Filtering
    skip_recipes: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FilterConfig:
        """Create config from a dictionary."""
        timeout = data.get("validation_timeout_seconds")
        return cls(
            detected_exit_code=int(data.get("detected_exit_code", DETECTED_EXIT_CODE)),
            shell=data.get("shell", "/bin/bash"),
            validation_timeout_seconds=float(timeout) if timeout is not None else None,
            max_output_size=int(data.get("max_output_size", 1_000_000)),
            extra_env={str(k): str(v) for k, v in (data.get("extra_env") or {}).items()},
            concurrent=bool(data.get("concurrent", False)),
            max_concurrent=int(data.get("max_concurrent", 5)),
            skip_recipes=[str(name) for name in data.get("skip_recipes") or []],
        )

    @classmethod
    def from_yaml(cls, path: Path) -> FilterConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> FilterConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    @classmethod
    def from_env(
        cls,
        environ: dict[str, str] | None = None,
        dotenv_path: Path | None = None,
    ) -> FilterConfig:
        """
        Load config from ``RFE_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``
            dotenv_path: Optional ``.env`` file loaded into ``os.environ`` first
                (existing variables are not overridden)
        """
        if dotenv_path is not None:
            load_dotenv(dotenv_path, override=False)
        env = os.environ if environ is None else environ

        data: dict[str, Any] = {}
        if f"{ENV_PREFIX}DETECTED_EXIT_CODE" in env:
            data["detected_exit_code"] = int(env[f"{ENV_PREFIX}DETECTED_EXIT_CODE"])
        if f"{ENV_PREFIX}SHELL" in env:
            data["shell"] = env[f"{ENV_PREFIX}SHELL"]
        if env.get(f"{ENV_PREFIX}VALIDATION_TIMEOUT"):
            data["validation_timeout_seconds"] = float(env[f"{ENV_PREFIX}VALIDATION_TIMEOUT"])
        if f"{ENV_PREFIX}CONCURRENT" in env:
            data["concurrent"] = _parse_bool(env[f"{ENV_PREFIX}CONCURRENT"])
        if f"{ENV_PREFIX}MAX_CONCURRENT" in env:
            data["max_concurrent"] = int(env[f"{ENV_PREFIX}MAX_CONCURRENT"])
        if f"{ENV_PREFIX}SKIP_RECIPES" in env:
            data["skip_recipes"] = _parse_list(env[f"{ENV_PREFIX}SKIP_RECIPES"])
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "detected_exit_code": self.detected_exit_code,
            "shell": self.shell,
            "validation_timeout_seconds": self.validation_timeout_seconds,
            "max_output_size": self.max_output_size,
            "extra_env": dict(self.extra_env),
            "concurrent": self.concurrent,
            "max_concurrent": self.max_concurrent,
            "skip_recipes": list(self.skip_recipes),
        }

    def is_skipped(self, recipe_name: str) -> bool:
        """Check if a recipe is excluded by configuration."""
        return recipe_name in self.skip_recipes
