"""
Host-level compatibility validators.
"""

from recipe_filter_engine.validators.base import HostValidator, validate_host
from recipe_filter_engine.validators.os_windows import (
    WINDOWS_NO_VERSION_MESSAGE,
    WINDOWS_UNSUPPORTED_MESSAGE,
    OsWindowsValidator,
    check_windows_version,
)

__all__ = [
    "HostValidator",
    "OsWindowsValidator",
    "WINDOWS_NO_VERSION_MESSAGE",
    "WINDOWS_UNSUPPORTED_MESSAGE",
    "check_windows_version",
    "validate_host",
]
