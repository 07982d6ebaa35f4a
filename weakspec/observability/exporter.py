# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Exporters publishing validation metrics and alerts.

Every exporter reads the collector's summary, so it sees one consistent
snapshot per export. ``attach`` routes a collector's alerts (such as
``maximality_violation``) to the exporter as they happen.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from .collector import MetricsCollector

logger = logging.getLogger(__name__)

Summary = Dict[str, Any]

# (section, key) paths into MetricsCollector.get_summary()
_Path = Tuple[str, str]


def _lookup(summary: Summary, path: _Path) -> Any:
    section, key = path
    return summary.get(section, {}).get(key, 0)


class MetricsExporter(ABC):
    """Base class for metrics exporters."""

    @abstractmethod
    def export(self, collector: MetricsCollector) -> None:
        """Publish a snapshot of the collector's metrics."""

    @abstractmethod
    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        """Publish a single alert."""

    def attach(self, collector: MetricsCollector) -> None:
        """Forward the collector's alerts to this exporter."""
        collector.register_alert_callback(self.export_alert)


# Rows of the text rendering: (label, summary path, format spec)
_TEXT_ROWS: Tuple[Tuple[str, _Path, str], ...] = (
    ("Batches", ("batches", "count"), "d"),
    ("Programs", ("batches", "programs"), "d"),
    ("Violations", ("batches", "violations"), "d"),
    ("Batch latency mean (ms)", ("batches", "mean_latency_ms"), ".1f"),
    ("Batch latency p99 (ms)", ("batches", "p99_latency_ms"), ".1f"),
)

_STRENGTHENING_ROWS: Tuple[Tuple[str, _Path, str], ...] = (
    ("Attempts", ("strengthenings", "attempts"), "d"),
    ("Rejected", ("strengthenings", "rejected"), "d"),
    ("Rejection rate", ("strengthenings", "rejection_rate"), ".0%"),
)


@dataclass
class LogExporter(MetricsExporter):
    """Write metrics and alerts to the ``weakspec`` loggers.

    Attributes:
        log_level: Level for metric snapshots (default: INFO)
        alert_level: Level for alerts (default: WARNING)
        format: 'json' for machine-readable output, anything else for text
    """

    log_level: int = logging.INFO
    alert_level: int = logging.WARNING
    format: str = "json"

    def export(self, collector: MetricsCollector) -> None:
        summary = collector.get_summary()
        body = (
            json.dumps(summary, indent=2, sort_keys=True)
            if self.format == "json"
            else self.render_text(summary)
        )
        logger.log(self.log_level, "Validation Metrics:\n%s", body)

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        if self.format == "json":
            body = json.dumps({"alert_type": alert_type, **data}, sort_keys=True)
        else:
            details = ", ".join(f"{k}={v}" for k, v in data.items())
            body = f"{alert_type} ({details})"
        logger.log(self.alert_level, "Validation Alert: %s", body)

    @staticmethod
    def render_text(summary: Summary) -> str:
        """Render a summary as indented ``label: value`` lines."""
        lines = ["Testing:"]
        lines.extend(
            f"  {label}: {_lookup(summary, path):{spec}}"
            for label, path, spec in _TEXT_ROWS
        )

        if _lookup(summary, ("strengthenings", "attempts")):
            lines.append("Strengthenings:")
            lines.extend(
                f"  {label}: {_lookup(summary, path):{spec}}"
                for label, path, spec in _STRENGTHENING_ROWS
            )
            by_method = summary["strengthenings"].get("violations_by_method", {})
            for method, count in sorted(by_method.items()):
                lines.append(f"  Maximality violations for {method}: {count}")

        return "\n".join(lines)


@dataclass
class CallbackExporter(MetricsExporter):
    """Hand metrics and alerts to caller-supplied functions.

    Callback failures are logged and never reach the validator.

    Attributes:
        metrics_callback: Receives the summary dict
        alert_callback: Receives (alert_type, data)
    """

    metrics_callback: Optional[Callable[[Summary], None]] = None
    alert_callback: Optional[Callable[[str, Dict[str, Any]], None]] = None

    def export(self, collector: MetricsCollector) -> None:
        if self.metrics_callback is not None:
            self._invoke("Metrics", self.metrics_callback, collector.get_summary())

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        if self.alert_callback is not None:
            self._invoke("Alert", self.alert_callback, alert_type, data)

    @staticmethod
    def _invoke(kind: str, callback: Callable[..., None], *args: Any) -> None:
        try:
            callback(*args)
        except Exception as e:
            logger.warning(f"{kind} callback error: {e}")


# Scalar gauges: (suffix, help text, summary path)
_GAUGES: Tuple[Tuple[str, str, _Path], ...] = (
    ("batches_tested", "Program batches handed to the tester", ("batches", "count")),
    ("programs_tested", "Programs handed to the tester", ("batches", "programs")),
    ("violations_found", "Violations reported by the tester", ("batches", "violations")),
    (
        "batch_latency_p99_ms",
        "P99 batch latency in milliseconds",
        ("batches", "p99_latency_ms"),
    ),
    (
        "strengthening_attempts",
        "Stronger specs tried",
        ("strengthenings", "attempts"),
    ),
    (
        "strengthenings_rejected",
        "Stronger specs the implementation violated",
        ("strengthenings", "rejected"),
    ),
)


class PrometheusExporter(MetricsExporter):
    """Expose validation metrics as Prometheus gauges.

    Serve ``registry`` from your own HTTP endpoint (pull mode), or pass
    ``push_gateway`` to push on every export. Requires the optional
    ``prometheus-client`` package.

    Attributes:
        namespace: Metric name prefix (default: "weakspec")
        push_gateway: Pushgateway address, None for pull mode
        job_name: Job label used when pushing (default: "weakspec")
    """

    def __init__(
        self,
        namespace: str = "weakspec",
        push_gateway: Optional[str] = None,
        job_name: str = "weakspec",
    ) -> None:
        try:
            import prometheus_client
        except ImportError:
            raise ImportError(
                "PrometheusExporter needs prometheus_client. "
                "Install with: pip install prometheus-client"
            )

        self._pc = prometheus_client
        self.namespace = namespace
        self.push_gateway = push_gateway
        self.job_name = job_name
        self._registry = prometheus_client.CollectorRegistry()

        self._gauges = {
            path: prometheus_client.Gauge(
                f"{namespace}_{suffix}", help_text, registry=self._registry
            )
            for suffix, help_text, path in _GAUGES
        }
        self._maximality = prometheus_client.Gauge(
            f"{namespace}_maximality_violations",
            "Maximality violations by method",
            ["method"],
            registry=self._registry,
        )

    def export(self, collector: MetricsCollector) -> None:
        summary = collector.get_summary()
        for path, gauge in self._gauges.items():
            gauge.set(_lookup(summary, path))

        by_method = summary.get("strengthenings", {}).get("violations_by_method", {})
        for method, count in by_method.items():
            self._maximality.labels(method=method).set(count)

        if self.push_gateway:
            try:
                self._pc.push_to_gateway(
                    self.push_gateway, job=self.job_name, registry=self._registry
                )
            except Exception as e:
                logger.warning(f"Prometheus push failed: {e}")

    def export_alert(self, alert_type: str, data: Dict[str, Any]) -> None:
        # Alerting is left to Alertmanager rules over the exported gauges.
        logger.debug(f"Prometheus alert (use Alertmanager rules): {alert_type}: {data}")

    @property
    def registry(self) -> Any:
        """The registry holding this exporter's gauges."""
        return self._registry
