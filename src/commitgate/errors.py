"""Error types raised by commitgate components."""

from __future__ import annotations


class GateError(RuntimeError):
    """Base class for failures while evaluating reference updates."""


class ConfigurationError(GateError):
    """Raised when a configured pattern cannot be used."""


class ProviderError(GateError):
    """Raised when changesets cannot be retrieved for a reference update."""
