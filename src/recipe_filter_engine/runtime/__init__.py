"""
Runtimes that execute recipe validation commands.
"""

from recipe_filter_engine.runtime.base import ExecutionResult, OutputCallback, ValidationRuntime
from recipe_filter_engine.runtime.bash import BashRuntime

__all__ = ["ValidationRuntime", "ExecutionResult", "OutputCallback", "BashRuntime"]
