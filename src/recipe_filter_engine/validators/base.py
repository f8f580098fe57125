"""
Host validators: checks that reject a whole host regardless of recipe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from recipe_filter_engine.models import HostSnapshot


class HostValidator(ABC):
    """
    Abstract base class for host validators.

    A validator returns an empty string when it has no objection to the
    host, or a human-readable message explaining why the host is unsupported.
    Validators must be pure and must not raise on malformed snapshots.
    """

    @abstractmethod
    def validate(self, snapshot: HostSnapshot) -> str:
        pass


def validate_host(snapshot: HostSnapshot, validators: list[HostValidator]) -> list[str]:
    """Run every validator and return the non-empty messages in order."""
    messages: list[str] = []
    for validator in validators:
        message = validator.validate(snapshot)
        if message:
            messages.append(message)
    return messages
