"""Error types raised by the half-space tree detector."""
from __future__ import annotations


class HalfSpaceError(ValueError):
    """Base class for every error raised by this package."""


class ConfigurationError(HalfSpaceError):
    """Raised when a detector or threshold is built with invalid parameters."""


class InputError(HalfSpaceError):
    """Raised when a sample does not match the configured dimensionality."""


__all__ = ["HalfSpaceError", "ConfigurationError", "InputError"]
