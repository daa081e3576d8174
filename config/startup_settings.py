"""Startup environment validation settings."""

from __future__ import annotations

import logging

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from config.settings import MailSettings

_KNOWN_ENVIRONMENTS = {"development", "test", "production"}


class StartupSettings(BaseSettings):
    """Env-backed startup invariants for API boot."""

    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("SHIFTREPORT_ENV", "NODE_ENV"),
    )
    api_token: str = Field(default="", validation_alias=AliasChoices("SHIFTREPORT_API_TOKEN"))

    model_config = {"extra": "ignore"}

    def validate_runtime_contract(self) -> None:
        environment = (self.environment or "").strip().lower()
        if environment not in _KNOWN_ENVIRONMENTS:
            raise RuntimeError(
                f"SHIFTREPORT_ENV must be one of {sorted(_KNOWN_ENVIRONMENTS)}, got '{environment or 'unset'}'."
            )
        if environment != "production":
            return

        if not (self.api_token or "").strip():
            raise RuntimeError("SHIFTREPORT_API_TOKEN must be set in production.")

        missing = MailSettings().missing_fields()
        if missing:
            # Requests answer 500 until the transport is configured.
            logging.getLogger(__name__).warning(
                "Mail transport incomplete at startup; missing %s",
                ", ".join(missing),
            )


def validate_startup_env() -> None:
    """Validate startup env invariants."""
    StartupSettings().validate_runtime_contract()


__all__ = ["StartupSettings", "validate_startup_env"]
