"""Per-stage timing for the report pipeline."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Iterator

from .metrics import get_metrics_client

STAGE_DURATION_METRIC = "stage_duration_ms"


class StageTimer:
    """Measure one pipeline stage and record it under ``STAGE_DURATION_METRIC``.

    The histogram is tagged with the stage name and ``status`` (``ok`` or
    ``error``), so failed renders do not skew the success latency.
    """

    def __init__(self, stage: str, tags: dict[str, str] | None = None, emit_metric: bool = True):
        self.stage = stage
        self.tags = {**(tags or {}), "stage": stage}
        self.emit_metric = emit_metric
        self.started_at = 0.0
        self.elapsed_ms = 0.0

    def __enter__(self) -> "StageTimer":
        self.started_at = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.elapsed_ms = (time.perf_counter() - self.started_at) * 1000
        if not self.emit_metric:
            return
        status = "ok" if exc_type is None else "error"
        get_metrics_client().timing(STAGE_DURATION_METRIC, self.elapsed_ms, {**self.tags, "status": status})


@contextmanager
def timed(stage: str, tags: dict[str, str] | None = None, emit_metric: bool = True) -> Iterator[StageTimer]:
    """Time a pipeline stage.

    Usage:
        with timed("render") as t:
            artifact = await renderer.render(document, path)
        logger.info("rendered", extra={"elapsed_ms": round(t.elapsed_ms)})
    """
    with StageTimer(stage, tags, emit_metric) as timer:
        yield timer
