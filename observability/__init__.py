"""Logging, metrics and stage timing shared by the API, pipeline and CLI."""

from .logging_config import configure_logging, get_logger
from .metrics import (
    MetricsClient,
    NullMetricsClient,
    RegistryMetricsClient,
    StdoutMetricsClient,
    get_metrics_client,
    reset_metrics_client,
    set_metrics_client,
)
from .timing import StageTimer, timed

__all__ = [
    "MetricsClient",
    "NullMetricsClient",
    "RegistryMetricsClient",
    "StdoutMetricsClient",
    "get_metrics_client",
    "reset_metrics_client",
    "set_metrics_client",
    "configure_logging",
    "get_logger",
    "timed",
    "StageTimer",
]
