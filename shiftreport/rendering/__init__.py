"""Rendering engine discovery and PDF capture."""

from __future__ import annotations

from .locator import resolve_executable_path
from .orchestrator import PdfRenderer, RenderedArtifact

__all__ = ["PdfRenderer", "RenderedArtifact", "resolve_executable_path"]
