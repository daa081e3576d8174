"""Report preparation: normalization, sanitization and document composition."""

from __future__ import annotations

from .composer import compose_document, format_quantities, load_logo_data_url
from .normalization import normalize_report
from .sanitizer import is_rich_text_empty, sanitize_rich_text
from .types import ComposedDocument, LabeledQuantity, NormalizedReport, PendingCounts

__all__ = [
    "ComposedDocument",
    "LabeledQuantity",
    "NormalizedReport",
    "PendingCounts",
    "compose_document",
    "format_quantities",
    "is_rich_text_empty",
    "load_logo_data_url",
    "normalize_report",
    "sanitize_rich_text",
]
