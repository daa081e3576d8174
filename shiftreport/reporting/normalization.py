"""Field normalization for the shift-lead report payload.

Every helper accepts raw JSON values of unknown type and returns a bounded
value or a safe default; only ``normalize_report`` raises, and only for the
three required fields (email, date, shift lead).
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping

from markupsafe import Markup

from shiftreport.common.exceptions import ValidationError
from shiftreport.reporting.sanitizer import is_rich_text_empty, sanitize_rich_text
from shiftreport.reporting.types import LabeledQuantity, NormalizedReport, PendingCounts

MAX_COUNT = 999
DEFAULT_LABEL_LENGTH = 40
ITEM_LABEL_LENGTH = 50
EMPTY_INCIDENTS_PLACEHOLDER = "Sin incidencias"

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _parse_leading_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def clamp_int(value: Any) -> int:
    """Parse a leading integer and clamp it to ``[0, MAX_COUNT]``; unparseable → 0."""
    parsed = _parse_leading_int(value)
    if parsed is None:
        return 0
    return max(0, min(MAX_COUNT, parsed))


def trim_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def normalize_label(value: Any, max_length: int = DEFAULT_LABEL_LENGTH) -> str:
    return trim_text(value)[:max_length]


def normalize_items(items: Any) -> list[LabeledQuantity]:
    """Normalize a ``[{tipo, cantidad}]`` list, dropping blank or zero entries."""
    if not isinstance(items, list):
        return []
    normalized = []
    for item in items:
        entry = item if isinstance(item, Mapping) else {}
        quantity = LabeledQuantity(
            label=normalize_label(entry.get("tipo"), ITEM_LABEL_LENGTH),
            count=clamp_int(entry.get("cantidad")),
        )
        if quantity.label and quantity.count > 0:
            normalized.append(quantity)
    return normalized


def format_report_date(value: Any) -> str:
    """Rewrite ``YYYY-MM-DD`` as ``DD/MM/YYYY``; anything else is only trimmed."""
    trimmed = trim_text(value)
    match = _ISO_DATE_RE.match(trimmed)
    if match:
        yyyy, mm, dd = match.groups()
        return f"{dd}/{mm}/{yyyy}"
    return trimmed


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value or ""))


def normalize_incidents(payload: Mapping[str, Any]) -> Markup:
    """Sanitize the incidents field, preferring the rich-text variant."""
    raw = payload.get("incidenciasHtml")
    if raw is None:
        raw = payload.get("incidencias")
    sanitized = sanitize_rich_text(raw)
    if is_rich_text_empty(sanitized):
        return sanitize_rich_text(EMPTY_INCIDENTS_PLACEHOLDER)
    return sanitized


def normalize_report(payload: Mapping[str, Any]) -> NormalizedReport:
    """Build a ``NormalizedReport`` or raise ``ValidationError`` naming the bad field."""
    email = trim_text(payload.get("email"))
    if not email or not is_valid_email(email):
        raise ValidationError("Email inválido.", field="email")

    report_date = format_report_date(payload.get("fecha"))
    shift_lead = trim_text(payload.get("jefeGuardia"))
    if not report_date or not shift_lead:
        missing = "fecha" if not report_date else "jefeGuardia"
        raise ValidationError(
            "Faltan campos obligatorios: fecha y/o jefe de guardia.",
            field=missing,
        )

    return NormalizedReport(
        email=email,
        report_date=report_date,
        shift_lead=shift_lead,
        imaging=tuple(normalize_items(payload.get("pruebas"))),
        specialist_reviews=tuple(normalize_items(payload.get("especialidades"))),
        counts=PendingCounts(
            admission=clamp_int(payload.get("pendientesIngreso")),
            progress_note=clamp_int(payload.get("pendientesEvolucion")),
            physician_assessment=clamp_int(payload.get("pendientesMedico")),
            observation_unit=clamp_int(payload.get("observacionPendientesUbicacion")),
        ),
        incidents=normalize_incidents(payload),
    )


__all__ = [
    "MAX_COUNT",
    "EMPTY_INCIDENTS_PLACEHOLDER",
    "clamp_int",
    "trim_text",
    "normalize_label",
    "normalize_items",
    "format_report_date",
    "is_valid_email",
    "normalize_incidents",
    "normalize_report",
]
