# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Metric data structures for validation runs."""

from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class BatchMetrics:
    """Metrics for program batches handed to the tester.

    Attributes:
        batch_sizes: Number of programs in each tested batch
        latencies_ms: Wall time spent testing each batch
        violations: Violations reported across all batches
    """

    batch_sizes: List[int] = field(default_factory=list)
    latencies_ms: List[float] = field(default_factory=list)
    violations: int = 0

    def record(self, size: int, latency_ms: float) -> None:
        """Record one tested batch."""
        self.batch_sizes.append(size)
        self.latencies_ms.append(latency_ms)

    @property
    def count(self) -> int:
        """Number of batches tested."""
        return len(self.batch_sizes)

    @property
    def programs(self) -> int:
        """Total programs tested."""
        return sum(self.batch_sizes)

    @property
    def mean_latency_ms(self) -> float:
        return statistics.mean(self.latencies_ms) if self.latencies_ms else 0.0

    def percentile(self, p: float) -> float:
        """Calculate a batch latency percentile (0-100)."""
        if not self.latencies_ms:
            return 0.0
        sorted_vals = sorted(self.latencies_ms)
        k = (len(sorted_vals) - 1) * (p / 100.0)
        f = int(k)
        c = f + 1 if f + 1 < len(sorted_vals) else f
        return sorted_vals[f] + (sorted_vals[c] - sorted_vals[f]) * (k - f)

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return {
            "count": self.count,
            "programs": self.programs,
            "violations": self.violations,
            "mean_latency_ms": self.mean_latency_ms,
            "p50_latency_ms": self.percentile(50),
            "p99_latency_ms": self.percentile(99),
        }


@dataclass
class StrengtheningMetrics:
    """Metrics for strengthening attempts of the maximality search.

    Attributes:
        attempts: Stronger specs tried
        rejected: Stronger specs the implementation violated
        violations_by_method: Maximality violations per method name
    """

    attempts: int = 0
    rejected: int = 0
    violations_by_method: Dict[str, int] = field(default_factory=dict)

    def record(self, method: str, rejected: bool) -> None:
        """Record the outcome of one strengthening attempt."""
        self.attempts += 1
        if rejected:
            self.rejected += 1
        else:
            self.violations_by_method[method] = (
                self.violations_by_method.get(method, 0) + 1
            )

    @property
    def maximality_violations(self) -> int:
        return sum(self.violations_by_method.values())

    @property
    def rejection_rate(self) -> float:
        """Fraction of attempts the implementation refuted."""
        return self.rejected / self.attempts if self.attempts else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Export as dictionary."""
        return {
            "attempts": self.attempts,
            "rejected": self.rejected,
            "maximality_violations": self.maximality_violations,
            "violations_by_method": dict(self.violations_by_method),
            "rejection_rate": self.rejection_rate,
        }
