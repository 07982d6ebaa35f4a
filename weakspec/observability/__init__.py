# Copyright Rand Arete @ Weakspec 2025
# Licensed under the Apache License, Version 2.0
"""Observability for validation runs.

Example:
    >>> from weakspec.observability import LogExporter, MetricsCollector
    >>> collector = MetricsCollector()
    >>> LogExporter().attach(collector)  # log maximality violations as they occur
    >>> validator = RandomTestValidator(tester, generator, metrics=collector)
    >>> # ... run the validator ...
    >>> LogExporter(format="text").export(collector)
"""

from .collector import MetricsCollector
from .metrics import BatchMetrics, StrengtheningMetrics
from .exporter import (
    CallbackExporter,
    LogExporter,
    MetricsExporter,
    PrometheusExporter,
)

__all__ = [
    "MetricsCollector",
    "BatchMetrics",
    "StrengtheningMetrics",
    "MetricsExporter",
    "LogExporter",
    "CallbackExporter",
    "PrometheusExporter",
]
