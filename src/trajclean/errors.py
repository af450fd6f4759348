"""Error types raised by trajclean."""

from __future__ import annotations


class TrajectoryError(RuntimeError):
    """Base error for trajectory processing failures."""


class ConfigurationError(TrajectoryError, ValueError):
    """Raised when a pipeline configuration is invalid. Fix the config and retry."""


class TrajectoryFormatError(TrajectoryError, ValueError):
    """Raised when a trajectory file is missing required columns."""


__all__ = [
    "TrajectoryError",
    "ConfigurationError",
    "TrajectoryFormatError",
]
