"""
Recipe Filter Engine - decides which installation recipes can run on a host.

Given a set of installation recipes and a snapshot of facts about the target
host (operating system, platform version, running processes), the engine
classifies every recipe as compatible, detected-but-unsupported, unsupported,
or failed validation, notifies status reporters, and aggregates the excluded
recipes into a single error.

Example:
    from recipe_filter_engine import (
        CountingStatusReporter,
        DiscoveredProcess,
        HostSnapshot,
        PreInstallConfig,
        Recipe,
        RecipeFilterRunner,
    )

    recipe = Recipe(
        name="apache-open-source-integration",
        display_name="Apache Integration",
        process_match=["apache2"],
        pre_install=PreInstallConfig(require_at_discovery="exit 132"),
    )
    snapshot = HostSnapshot(
        os="linux",
        processes=(DiscoveredProcess(name="apache2", cmdline="apache2", pid=1234),),
    )

    reporter = CountingStatusReporter()
    runner = RecipeFilterRunner(subscribers=[reporter])
    report = await runner.evaluate_all([recipe], snapshot)
    print(report.error)  # 1 of 1 recipe excluded: ...
"""

from recipe_filter_engine.config import DETECTED_EXIT_CODE, FilterConfig
from recipe_filter_engine.engine import RecipeFilterEngine
from recipe_filter_engine.filters import (
    FilterResult,
    ProcessMatchFilter,
    RecipeFilter,
    SkipListFilter,
    match_processes,
)
from recipe_filter_engine.loaders import RecipeLoader, RecipeLoadError, YamlRecipeLoader
from recipe_filter_engine.models import (
    ClassificationOutcome,
    DiscoveredProcess,
    HostSnapshot,
    InstallTarget,
    Outcome,
    PreInstallConfig,
    Recipe,
    RecipeStatusEvent,
)
from recipe_filter_engine.reporting import (
    ConsoleStatusReporter,
    CountingStatusReporter,
    LoggingStatusReporter,
    StatusReporter,
    render_outcomes,
)
from recipe_filter_engine.runner import (
    FilterCancelledError,
    FilterReport,
    RecipeFilterError,
    RecipeFilterRunner,
)
from recipe_filter_engine.runtime import BashRuntime, ExecutionResult, ValidationRuntime
from recipe_filter_engine.validation import ValidationResult, ValidationRunner, ValidationStatus
from recipe_filter_engine.validators import (
    HostValidator,
    OsWindowsValidator,
    check_windows_version,
)

__version__ = "0.1.0"

__all__ = [
    # Engine
    "RecipeFilterEngine",
    "RecipeFilterRunner",
    "FilterReport",
    # Errors
    "RecipeFilterError",
    "FilterCancelledError",
    "RecipeLoadError",
    # Config
    "FilterConfig",
    "DETECTED_EXIT_CODE",
    # Models
    "Recipe",
    "PreInstallConfig",
    "InstallTarget",
    "HostSnapshot",
    "DiscoveredProcess",
    "Outcome",
    "ClassificationOutcome",
    "RecipeStatusEvent",
    # Filters
    "RecipeFilter",
    "FilterResult",
    "ProcessMatchFilter",
    "SkipListFilter",
    "match_processes",
    # Validators
    "HostValidator",
    "OsWindowsValidator",
    "check_windows_version",
    # Validation
    "ValidationRunner",
    "ValidationResult",
    "ValidationStatus",
    # Runtime
    "ValidationRuntime",
    "BashRuntime",
    "ExecutionResult",
    # Loaders
    "RecipeLoader",
    "YamlRecipeLoader",
    # Reporting
    "StatusReporter",
    "CountingStatusReporter",
    "LoggingStatusReporter",
    "ConsoleStatusReporter",
    "render_outcomes",
]
