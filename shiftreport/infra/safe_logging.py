"""PHI-safe logging helpers."""

from __future__ import annotations

import hashlib


def safe_log_text(text: str | None) -> str:
    """Return a loggable stand-in for clinician-authored text.

    Only a short hash and the length are returned, so repeated submissions
    can be correlated in logs without storing the incident narrative.
    """
    normalized = (text or "").strip()
    if not normalized:
        return "<empty>"
    digest = hashlib.sha256(normalized.encode("utf-8")).hexdigest()[:12]
    return f"<sha256={digest} len={len(normalized)}>"


def mask_email(address: str | None) -> str:
    """Keep the domain and first character of the local part: ``j***@example.org``."""
    local, sep, domain = (address or "").partition("@")
    if not sep or not local:
        return "<invalid>"
    return f"{local[0]}***@{domain}"


__all__ = ["safe_log_text", "mask_email"]
