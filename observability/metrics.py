"""Process-wide metrics for the shift-report service.

``METRICS_BACKEND`` picks the client on first use:

- ``null`` (default): everything is discarded.
- ``stdout``: one JSON line per observation on stderr, for local runs.
- ``registry`` / ``prometheus``: in-memory counters and histograms, scraped
  as Prometheus text from ``GET /metrics``.
"""

from __future__ import annotations

import json
import os
import sys
import threading
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Callable

Tags = dict[str, str]

DEFAULT_PREFIX = "shift_report"

# Upper bounds in milliseconds. A cold Chromium start alone is ~1s.
LATENCY_BUCKETS_MS = (50, 100, 250, 500, 1000, 2500, 5000, 10000, 30000, 60000)


class MetricsClient(ABC):
    @abstractmethod
    def incr(self, name: str, tags: Tags | None = None, value: int = 1) -> None:
        """Add ``value`` to the counter ``name``."""

    @abstractmethod
    def timing(self, name: str, value_ms: float, tags: Tags | None = None) -> None:
        """Observe one duration, in milliseconds."""


class NullMetricsClient(MetricsClient):
    def incr(self, name: str, tags: Tags | None = None, value: int = 1) -> None:
        return None

    def timing(self, name: str, value_ms: float, tags: Tags | None = None) -> None:
        return None


class StdoutMetricsClient(MetricsClient):
    """Print observations as JSON lines; useful with ``LOG_FORMAT=plain``."""

    def __init__(self, prefix: str = DEFAULT_PREFIX, stream=None):
        self.prefix = prefix
        self.stream = stream or sys.stderr

    def _write(self, kind: str, name: str, value: float, tags: Tags | None) -> None:
        line = {
            "ts": round(time.time(), 3),
            "kind": kind,
            "name": f"{self.prefix}.{name}",
            "value": value,
            "tags": dict(tags or {}),
        }
        self.stream.write(json.dumps(line) + "\n")

    def incr(self, name: str, tags: Tags | None = None, value: int = 1) -> None:
        self._write("counter", name, value, tags)

    def timing(self, name: str, value_ms: float, tags: Tags | None = None) -> None:
        self._write("timing", name, value_ms, tags)


def _label_set(tags: Tags | None) -> tuple[tuple[str, str], ...]:
    return tuple(sorted((tags or {}).items()))


def _render_labels(labels: tuple[tuple[str, str], ...], **extra: str) -> str:
    pairs = list(labels) + list(extra.items())
    if not pairs:
        return ""
    return "{" + ",".join(f'{key}="{value}"' for key, value in pairs) + "}"


class RegistryMetricsClient(MetricsClient):
    """Thread-safe in-memory registry with Prometheus text exposition."""

    def __init__(self, prefix: str = DEFAULT_PREFIX, buckets: tuple[float, ...] = LATENCY_BUCKETS_MS):
        self.prefix = prefix
        self.buckets = tuple(buckets)
        self._lock = threading.Lock()
        self._counters: dict[str, dict[tuple, float]] = defaultdict(lambda: defaultdict(float))
        # name -> labels -> [bucket counts..., +Inf count, sum]
        self._histograms: dict[str, dict[tuple, list[float]]] = defaultdict(dict)

    def incr(self, name: str, tags: Tags | None = None, value: int = 1) -> None:
        with self._lock:
            self._counters[name][_label_set(tags)] += value

    def timing(self, name: str, value_ms: float, tags: Tags | None = None) -> None:
        with self._lock:
            series = self._histograms[name].setdefault(
                _label_set(tags), [0.0] * (len(self.buckets) + 2)
            )
            for index, bound in enumerate(self.buckets):
                if value_ms <= bound:
                    series[index] += 1
            series[-2] += 1
            series[-1] += value_ms

    def counter_value(self, name: str, tags: Tags | None = None) -> float:
        with self._lock:
            return self._counters.get(name, {}).get(_label_set(tags), 0.0)

    def _metric(self, name: str) -> str:
        return f"{self.prefix}_{name}".replace(".", "_").replace("-", "_")

    def export_prometheus(self) -> str:
        out: list[str] = []
        with self._lock:
            for name in sorted(self._counters):
                metric = self._metric(name) + "_total"
                out.append(f"# TYPE {metric} counter")
                for labels, value in sorted(self._counters[name].items()):
                    out.append(f"{metric}{_render_labels(labels)} {value}")
            for name in sorted(self._histograms):
                metric = self._metric(name)
                out.append(f"# TYPE {metric} histogram")
                for labels, series in sorted(self._histograms[name].items()):
                    for bound, count in zip(self.buckets, series):
                        out.append(f"{metric}_bucket{_render_labels(labels, le=str(bound))} {int(count)}")
                    total = int(series[-2])
                    out.append(f"{metric}_bucket{_render_labels(labels, le='+Inf')} {total}")
                    out.append(f"{metric}_sum{_render_labels(labels)} {series[-1]}")
                    out.append(f"{metric}_count{_render_labels(labels)} {total}")
        return "\n".join(out) + "\n"

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()


_BACKENDS: dict[str, Callable[[], MetricsClient]] = {
    "null": NullMetricsClient,
    "stdout": StdoutMetricsClient,
    "registry": RegistryMetricsClient,
    "prometheus": RegistryMetricsClient,
}

_client: MetricsClient | None = None
_client_lock = threading.Lock()


def get_metrics_client() -> MetricsClient:
    """Return the shared client, creating it from ``METRICS_BACKEND`` on first call."""
    global _client
    with _client_lock:
        if _client is None:
            backend = os.getenv("METRICS_BACKEND", "null").strip().lower()
            _client = _BACKENDS.get(backend, NullMetricsClient)()
        return _client


def set_metrics_client(client: MetricsClient) -> None:
    global _client
    with _client_lock:
        _client = client


def reset_metrics_client() -> None:
    """Drop the shared client; the next lookup re-reads the environment."""
    global _client
    with _client_lock:
        _client = None
