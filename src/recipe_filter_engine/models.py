"""
Core data models for the recipe filter engine.

These models describe installation recipes, the read-only host snapshot they
are evaluated against, and the per-recipe classification produced by a
filter run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass
class PreInstallConfig:
    """Pre-install settings declared by a recipe."""

    require_at_discovery: str = ""  # Validation command, empty = no validation
    info: str = ""  # Operator-facing note shown before installing


@dataclass
class InstallTarget:
    """A host shape a recipe declares it can install onto."""

    type: str = ""  # host, application, ...
    os: str = ""
    platform: str = ""
    platform_family: str = ""
    platform_version: str = ""
    kernel_arch: str = ""


@dataclass
class Recipe:
    """
    An installable unit with declared compatibility prerequisites.

    Recipes are owned by the caller and are never modified by a filter run.
    """

    name: str  # Unique identifier
    display_name: str = ""
    description: str = ""
    repository: str = ""
    process_match: list[str] = field(default_factory=list)
    pre_install: PreInstallConfig = field(default_factory=PreInstallConfig)
    install_targets: list[InstallTarget] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)

    def __hash__(self) -> int:
        return hash(self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Recipe):
            return False
        return self.name == other.name

    @property
    def validation_command(self) -> str:
        return self.pre_install.require_at_discovery

    @property
    def first_name(self) -> str:
        """First word of the display name, e.g. "MongoDB" for "MongoDB Integration"."""
        words = self.display_name.split()
        return words[0] if words else ""

    @property
    def label(self) -> str:
        """Name to show an operator."""
        return self.display_name or self.name


@dataclass(frozen=True)
class DiscoveredProcess:
    """A process found running on the target host."""

    name: str
    cmdline: str = ""
    pid: int = 0


@dataclass(frozen=True)
class HostSnapshot:
    """
    Read-only facts about the target host.

    Built by discovery; shared by every recipe evaluation in a run.
    """

    os: str = ""  # windows, linux, darwin
    platform: str = ""  # ubuntu, centos, Microsoft Windows Server 2019, ...
    platform_family: str = ""
    platform_version: str = ""  # Dot-delimited, arbitrary depth
    kernel_arch: str = ""
    kernel_version: str = ""
    hostname: str = ""
    processes: tuple[DiscoveredProcess, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HostSnapshot:
        """
        Create a snapshot from a mapping.

        Accepts snake_case or camelCase keys, e.g. ``platform_version`` or
        ``platformVersion``. Processes are read from ``processes`` or
        ``discoveredProcesses``.
        """

        def pick(snake: str, camel: str) -> str:
            value = data.get(snake, data.get(camel, ""))
            return "" if value is None else str(value)

        raw_processes = data.get("processes", data.get("discoveredProcesses")) or []
        processes: list[DiscoveredProcess] = []
        for raw in raw_processes:
            if isinstance(raw, str):
                processes.append(DiscoveredProcess(name=raw, cmdline=raw))
            elif isinstance(raw, dict):
                processes.append(
                    DiscoveredProcess(
                        name=str(raw.get("name", "")),
                        cmdline=str(raw.get("cmdline", raw.get("cmd", "")) or ""),
                        pid=int(raw.get("pid", 0) or 0),
                    )
                )

        return cls(
            os=pick("os", "os"),
            platform=pick("platform", "platform"),
            platform_family=pick("platform_family", "platformFamily"),
            platform_version=pick("platform_version", "platformVersion"),
            kernel_arch=pick("kernel_arch", "kernelArch"),
            kernel_version=pick("kernel_version", "kernelVersion"),
            hostname=pick("hostname", "hostname"),
            processes=tuple(processes),
        )


class Outcome(str, Enum):
    """Terminal classification of one recipe in a filter run."""

    COMPATIBLE = "compatible"
    DETECTED_UNSUPPORTED = "detected_unsupported"
    UNSUPPORTED = "unsupported"
    VALIDATION_ERROR = "validation_error"

    @property
    def label(self) -> str:
        return _OUTCOME_LABELS[self]


_OUTCOME_LABELS = {
    Outcome.COMPATIBLE: "compatible",
    Outcome.DETECTED_UNSUPPORTED: "detected but unsupported",
    Outcome.UNSUPPORTED: "unsupported",
    Outcome.VALIDATION_ERROR: "validation error",
}


@dataclass
class ClassificationOutcome:
    """The verdict for a single recipe."""

    recipe: Recipe
    outcome: Outcome
    message: str = ""  # Empty for compatible recipes
    cancelled: bool = False  # Validation error caused by cancellation
    exit_code: int | None = None  # Exit code of the validation command, if it ran
    duration_ms: float = 0.0

    @classmethod
    def compatible(cls, recipe: Recipe, duration_ms: float = 0.0) -> ClassificationOutcome:
        return cls(recipe=recipe, outcome=Outcome.COMPATIBLE, exit_code=0, duration_ms=duration_ms)

    @property
    def is_compatible(self) -> bool:
        return self.outcome is Outcome.COMPATIBLE

    @property
    def recipe_name(self) -> str:
        return self.recipe.name

    def describe(self) -> str:
        """One line for an operator: ``name: outcome: reason``."""
        if self.message:
            return f"{self.recipe.name}: {self.outcome.label}: {self.message}"
        return f"{self.recipe.name}: {self.outcome.label}"


@dataclass
class RecipeStatusEvent:
    """Payload delivered to status reporters."""

    recipe: Recipe
    msg: str = ""
    validation_duration_ms: float = 0.0

    @property
    def recipe_name(self) -> str:
        return self.recipe.name
