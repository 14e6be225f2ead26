"""Core utilities and configuration."""

from bulletin.core.config import settings, get_settings
from bulletin.core.exceptions import BulletinError, ValidationError, StoreError
from bulletin.core.observability import (
    get_logger,
    MetricsCollector,
    health_monitor,
    init_observability,
    trace_operation,
    monitor_performance,
)

__all__ = [
    "settings",
    "get_settings",
    "BulletinError",
    "ValidationError",
    "StoreError",
    "get_logger",
    "MetricsCollector",
    "health_monitor",
    "init_observability",
    "trace_operation",
    "monitor_performance",
]
