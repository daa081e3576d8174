"""Compose the printable shift-lead report as a self-contained HTML document."""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from observability.logging_config import get_logger
from shiftreport.reporting.types import ComposedDocument, LabeledQuantity, NormalizedReport

_TEMPLATE_ROOT = Path(__file__).parent / "templates"
_TEMPLATE_NAME = "parte_jefatura.html.jinja"

DOCUMENT_TITLE = "Parte Jefatura"
DOCUMENT_HEADING = "INFORME JEFATURA GUARDIA URGENCIAS"
EMPTY_LIST_MARKER = "—"

# Every value is escaped unless it is already ``Markup`` (the sanitized incidents).
_ENV = Environment(
    loader=FileSystemLoader(str(_TEMPLATE_ROOT)),
    autoescape=select_autoescape(enabled_extensions=("html", "jinja"), default=True),
    trim_blocks=True,
    lstrip_blocks=True,
)

logger = get_logger(__name__)


def format_quantities(items: Iterable[LabeledQuantity]) -> str:
    """``"RX: 2; TAC: 1"``, or an em dash when there is nothing pending."""
    rendered = [item.display() for item in items]
    return "; ".join(rendered) if rendered else EMPTY_LIST_MARKER


def _table_rows(report: NormalizedReport) -> list[tuple[str, str]]:
    counts = report.counts
    return [
        ("PENDIENTES DE INGRESO", str(counts.admission)),
        ("PENDIENTES DE PRUEBA RADIOLÓGICA", format_quantities(report.imaging)),
        (
            "PENDIENTES DE VALORACIÓN POR ESPECIALIDAD (ESPECIFICAR)",
            format_quantities(report.specialist_reviews),
        ),
        ("PENDIENTES DE EVOLUCIÓN", str(counts.progress_note)),
        ("PENDIENTES DE ASISTENCIA", str(counts.physician_assessment)),
        ("OBSERVACIÓN URGENCIAS", str(counts.observation_unit)),
    ]


def compose_document(report: NormalizedReport, logo_data_url: str | None = None) -> ComposedDocument:
    """Render ``report`` into the fixed printable layout. Performs no I/O."""
    template = _ENV.get_template(_TEMPLATE_NAME)
    html = template.render(
        title=DOCUMENT_TITLE,
        heading=DOCUMENT_HEADING,
        report=report,
        rows=_table_rows(report),
        logo_data_url=logo_data_url,
    )
    return ComposedDocument(html=html, title=DOCUMENT_TITLE, has_logo=bool(logo_data_url))


def load_logo_data_url(path: Path) -> str | None:
    """Read the header logo as a PNG data URI; a missing or unreadable file yields None."""
    try:
        payload = Path(path).read_bytes()
    except OSError as exc:
        logger.debug("Logo not embedded", extra={"path": str(path), "error": type(exc).__name__})
        return None
    return "data:image/png;base64," + base64.b64encode(payload).decode("ascii")


__all__ = ["compose_document", "format_quantities", "load_logo_data_url"]
