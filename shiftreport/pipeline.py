"""End-to-end shift-report pipeline: normalize, compose, render, deliver.

Stages run sequentially and fail fast; the first ``ShiftReportError`` aborts
the request. Nothing is retried and nothing is persisted: the PDF lives only
for the duration of ``run``.
"""

from __future__ import annotations

import asyncio
import functools
from concurrent.futures import Executor
from typing import Any, Callable, Mapping

from config.settings import AssetSettings, MailSettings, RenderSettings
from observability.logging_config import get_logger
from observability.metrics import get_metrics_client
from observability.timing import timed
from shiftreport.common.exceptions import RenderError, ShiftReportError
from shiftreport.delivery.mailer import DeliveryReceipt, ensure_mail_configured, send_report
from shiftreport.infra.safe_logging import mask_email, safe_log_text
from shiftreport.reporting.composer import compose_document, load_logo_data_url
from shiftreport.reporting.normalization import normalize_report
from shiftreport.reporting.types import ComposedDocument, NormalizedReport
from shiftreport.rendering.locator import (
    ManagedResolver,
    playwright_managed_executable,
    resolve_executable_path,
)
from shiftreport.rendering.orchestrator import PdfRenderer, RenderedArtifact

logger = get_logger(__name__)

REQUESTS_METRIC = "requests"
MailSender = Callable[[RenderedArtifact, str, MailSettings], DeliveryReceipt]


class ShiftReportPipeline:
    """Per-request pipeline; holds configuration and collaborators, no request state."""

    def __init__(
        self,
        *,
        mail_settings: MailSettings,
        render_settings: RenderSettings,
        asset_settings: AssetSettings,
        renderer: PdfRenderer | None = None,
        managed_resolver: ManagedResolver = playwright_managed_executable,
        mail_sender: MailSender = send_report,
        executor: Executor | None = None,
    ):
        self.mail_settings = mail_settings
        self.render_settings = render_settings
        self.asset_settings = asset_settings
        self.renderer = renderer or PdfRenderer(render_settings)
        self._managed_resolver = managed_resolver
        self._mail_sender = mail_sender
        self._executor = executor

    def prepare(self, payload: Mapping[str, Any]) -> tuple[NormalizedReport, ComposedDocument]:
        report = normalize_report(payload)
        logger.info(
            "Shift report accepted",
            extra={
                "recipient": mask_email(report.email),
                "imaging_items": len(report.imaging),
                "specialist_items": len(report.specialist_reviews),
                "incidents": safe_log_text(str(report.incidents)),
            },
        )
        logo = load_logo_data_url(self.asset_settings.logo_path)
        return report, compose_document(report, logo)

    async def render(self, document: ComposedDocument) -> RenderedArtifact:
        executable_path = await resolve_executable_path(
            self.render_settings,
            managed_resolver=self._managed_resolver,
        )
        with timed("render") as timing:
            artifact = await self.renderer.render(document, executable_path)
        logger.info(
            "Shift report rendered",
            extra={"bytes": artifact.size, "elapsed_ms": round(timing.elapsed_ms)},
        )
        return artifact

    async def _deliver(self, artifact: RenderedArtifact, recipient: str) -> DeliveryReceipt:
        loop = asyncio.get_running_loop()
        bound = functools.partial(self._mail_sender, artifact, recipient, self.mail_settings)
        with timed("delivery"):
            return await loop.run_in_executor(self._executor, bound)

    async def run(self, payload: Mapping[str, Any]) -> DeliveryReceipt:
        metrics = get_metrics_client()
        try:
            report, document = self.prepare(payload)
            ensure_mail_configured(self.mail_settings)
            artifact = await self.render(document)
            receipt = await self._deliver(artifact, report.email)
        except ShiftReportError as exc:
            metrics.incr(REQUESTS_METRIC, {"outcome": type(exc).__name__})
            logger.warning(
                "Shift report pipeline failed",
                exc_info=isinstance(exc, RenderError),
                extra={"stage_error": type(exc).__name__, "error": str(exc)},
            )
            raise
        except Exception as exc:
            metrics.incr(REQUESTS_METRIC, {"outcome": "unexpected"})
            logger.error(
                "Shift report pipeline crashed",
                exc_info=True,
                extra={"error_type": type(exc).__name__},
            )
            raise
        metrics.incr(REQUESTS_METRIC, {"outcome": "sent"})
        return receipt


__all__ = ["ShiftReportPipeline"]
