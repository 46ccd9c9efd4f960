"""Observability: structured logging and metrics hooks for mdbridge."""

from __future__ import annotations

from .logger import StructuredFormatter, fields, get_logger
from .metrics import MetricsHook, NoopMetricsHook, resolve_metrics

__all__ = [
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "fields",
    "get_logger",
    "resolve_metrics",
]
