# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Central metrics collection for validation runs."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List

from .metrics import BatchMetrics, StrengtheningMetrics

logger = logging.getLogger(__name__)

AlertCallback = Callable[[str, Dict[str, Any]], None]


@dataclass
class MetricsCollector:
    """Central collector for validation metrics.

    Thread-safe collector shared by the validators of one mining session.
    Several validator runs may record into the same collector concurrently.

    Alerts:
        maximality_violation: A stronger spec survived testing
    """

    _batches: BatchMetrics = field(default_factory=BatchMetrics)
    _strengthenings: StrengtheningMetrics = field(default_factory=StrengtheningMetrics)

    # Thread safety
    _lock: threading.Lock = field(default_factory=threading.Lock)

    # Callbacks for real-time alerts
    _alert_callbacks: List[AlertCallback] = field(default_factory=list)

    def record_batch(self, size: int, latency_ms: float) -> None:
        """Record a batch of programs tested.

        Args:
            size: Number of programs in the batch
            latency_ms: Time spent on the batch
        """
        with self._lock:
            self._batches.record(size, latency_ms)

    def record_violation(self) -> None:
        """Record one violation reported by the tester."""
        with self._lock:
            self._batches.violations += 1

    def record_strengthening(self, method: str, attribute: str, rejected: bool) -> None:
        """Record the outcome of one strengthening attempt.

        Args:
            method: Method name the stronger spec was tried for
            attribute: Attribute key that was strengthened
            rejected: Whether the implementation violated the stronger spec
        """
        with self._lock:
            self._strengthenings.record(method, rejected)

        if not rejected:
            self._trigger_alert(
                "maximality_violation", {"method": method, "attribute": attribute}
            )

    def register_alert_callback(self, callback: AlertCallback) -> None:
        """Register a callback for alerts.

        Args:
            callback: Function(alert_type, data) to call on alerts
        """
        with self._lock:
            self._alert_callbacks.append(callback)

    def _trigger_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        """Trigger alert callbacks (called without the lock held)."""
        for callback in self._alert_callbacks:
            try:
                callback(alert_type, data)
            except Exception as e:
                logger.warning(f"Alert callback error: {e}")

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all recorded metrics."""
        with self._lock:
            return {
                "batches": self._batches.to_dict(),
                "strengthenings": self._strengthenings.to_dict(),
            }

    def reset(self) -> None:
        """Discard all recorded metrics."""
        with self._lock:
            self._batches = BatchMetrics()
            self._strengthenings = StrengtheningMetrics()
