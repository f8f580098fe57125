"""
Windows version validator.

Windows releases before 6.1 (Windows 7 / Server 2008 R2) are rejected.
Versions are read from the snapshot's platform version, e.g.
``10.0.17763`` or ``6.3.9600``.
"""

from __future__ import annotations

from recipe_filter_engine.models import HostSnapshot
from recipe_filter_engine.validators.base import HostValidator

WINDOWS_OS = "windows"
WINDOWS_MIN_MAJOR = 6

WINDOWS_UNSUPPORTED_MESSAGE = "This version of Windows is no longer supported"
WINDOWS_NO_VERSION_MESSAGE = "Failed to identified a valid version of Windows"


def _parse_component(token: str) -> int | None:
    # Only plain non-negative decimals; int() would also accept " 6", "+6" and "6_0".
    if not token or not token.isascii() or not token.isdigit():
        return None
    return int(token)


def parse_windows_version(version: str) -> tuple[int, int] | None:
    """
    Parse ``major[.minor[...]]`` into ``(major, minor)``.

    A lone major means minor 0. When a second component is present it must
    parse too; ``"6.x"`` is unparsed rather than ``(6, 0)``. Returns None
    for anything that cannot be parsed.
    """
    tokens = version.split(".")
    major = _parse_component(tokens[0])
    if major is None:
        return None
    if len(tokens) == 1:
        return major, 0
    minor = _parse_component(tokens[1])
    if minor is None:
        return None
    return major, minor


def ensure_minimum_version(major: int, minor: int) -> str:
    if major < WINDOWS_MIN_MAJOR:
        return WINDOWS_UNSUPPORTED_MESSAGE
    if major == WINDOWS_MIN_MAJOR and minor == 0:
        return WINDOWS_UNSUPPORTED_MESSAGE
    return ""


def check_windows_version(os_id: str, version: str) -> str:
    """Return "" when compatible or not Windows, otherwise the reason."""
    if os_id != WINDOWS_OS:
        return ""
    parsed = parse_windows_version(version)
    if parsed is None:
        return WINDOWS_NO_VERSION_MESSAGE
    return ensure_minimum_version(*parsed)


class OsWindowsValidator(HostValidator):
    """Rejects Windows hosts older than 6.1."""

    def validate(self, snapshot: HostSnapshot) -> str:
        return check_windows_version(snapshot.os, snapshot.platform_version)
