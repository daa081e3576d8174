"""Exception hierarchy for the shift-report pipeline.

Each pipeline stage raises exactly one of these types; the API layer maps
them onto HTTP status codes and terse response bodies.
"""

from __future__ import annotations


class ShiftReportError(Exception):
    """Base error for the shift-report pipeline."""

    status_code = 500


class ValidationError(ShiftReportError):
    """A required report field is missing or malformed.

    The message is shown to the clinician as-is, so it names the field.
    """

    status_code = 400

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class ConfigurationError(ShiftReportError):
    """Mail transport settings are incomplete.

    Only the names of the missing settings are kept, never their values.
    """

    def __init__(self, message: str, missing: list[str] | None = None):
        self.missing = list(missing or [])
        super().__init__(message)


class RenderError(ShiftReportError):
    """Launching the engine, loading the document, or capturing the PDF failed."""

    pass


class EngineUnavailableError(RenderError):
    """No rendering engine executable could be resolved."""

    pass


class DeliveryError(ShiftReportError):
    """The mail transport rejected or failed the submission."""

    def __init__(
        self,
        message: str,
        smtp_code: int | None = None,
        smtp_response: str | None = None,
    ):
        self.smtp_code = smtp_code
        self.smtp_response = smtp_response
        super().__init__(message)


__all__ = [
    "ShiftReportError",
    "ValidationError",
    "ConfigurationError",
    "RenderError",
    "EngineUnavailableError",
    "DeliveryError",
]
