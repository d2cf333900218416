"""
Error types for pihole-ha.

``ValidationError`` is recoverable: the interactive shell reprompts for the
field. Every ``SetupError`` is fatal: the apply run stops at the phase that
raised it, and files written by earlier phases stay on disk.
"""

from __future__ import annotations


class ValidationError(ValueError):
    """A raw input value was rejected."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason


class SetupError(Exception):
    """A fatal failure during an apply phase."""

    def __init__(self, message: str, phase: str, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.phase = phase
        self.hint = hint

    def describe(self) -> str:
        """Operator-facing diagnostic naming the phase and what to check."""
        text = f"ERROR [{self.phase}]: {self.message}"
        if self.hint:
            text += f"\n  Suggested check: {self.hint}"
        return text


class DependencyError(SetupError):
    """Package installation failed."""


class AccountError(SetupError):
    """The health check account could not be created."""


class WriteError(SetupError):
    """An artifact could not be written or its mode could not be set."""


class ServiceError(SetupError):
    """The service manager could not (re)start the failover daemon."""
