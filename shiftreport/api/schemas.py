"""Pydantic schemas for the shift-report HTTP surface."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ShiftReportRequest(BaseModel):
    """Raw report payload as posted by the form.

    Fields are untyped: coercion, clamping and rejection belong
    to the normalizer, so a stray string in a count field never becomes a 422.
    """

    model_config = ConfigDict(extra="ignore")

    email: Any = None
    fecha: Any = None
    jefeGuardia: Any = None
    pruebas: Any = None
    especialidades: Any = None
    incidencias: Any = None
    incidenciasHtml: Any = None
    pendientesIngreso: Any = None
    pendientesEvolucion: Any = None
    pendientesMedico: Any = None
    observacionPendientesUbicacion: Any = None


class MailSentResponse(BaseModel):
    ok: bool = True
    messageId: str = Field(..., description="Transport message identifier")


class ErrorResponse(BaseModel):
    error: str
    details: str | None = None


__all__ = ["ShiftReportRequest", "MailSentResponse", "ErrorResponse"]
