# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Limits bounding a validation run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ValidationLimits:
    """Bounds on how much testing a validator performs.

    Attributes:
        max_programs: Maximum programs tested across one get_violations call
        batch_size: Programs handed to the tester at once
        max_attempts: Maximum programs drawn from a random generator per call,
            counting programs the filter rejects
        max_size: Maximum invocations per generated program
        max_length: Maximum invocations per generated session
        max_sessions: Maximum sessions per generated program

    Example:
        >>> limits = ValidationLimits(max_programs=200, max_sessions=3)
        >>> validator = RandomTestValidator(tester, generator, limits=limits)
    """

    max_programs: int = 1000
    batch_size: int = 100
    max_attempts: int = 10000
    max_size: int = 5
    max_length: int = 3
    max_sessions: int = 2

    def __post_init__(self) -> None:
        """Validate limits."""
        for name in (
            "max_programs",
            "batch_size",
            "max_attempts",
            "max_size",
            "max_length",
            "max_sessions",
        ):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")

    def generator_limits(self) -> Dict[str, int]:
        """The subset of limits a program generator honors."""
        return {
            "max_size": self.max_size,
            "max_length": self.max_length,
            "max_sessions": self.max_sessions,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "max_programs": self.max_programs,
            "batch_size": self.batch_size,
            "max_attempts": self.max_attempts,
            "max_size": self.max_size,
            "max_length": self.max_length,
            "max_sessions": self.max_sessions,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> ValidationLimits:
        """Create from dictionary."""
        return cls(
            max_programs=d.get("max_programs", 1000),
            batch_size=d.get("batch_size", 100),
            max_attempts=d.get("max_attempts", 10000),
            max_size=d.get("max_size", 5),
            max_length=d.get("max_length", 3),
            max_sessions=d.get("max_sessions", 2),
        )


# Default limits singleton
DEFAULT_LIMITS = ValidationLimits()
