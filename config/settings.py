"""Configuration settings using pydantic-settings."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings


_REPO_ROOT = Path(__file__).resolve().parents[1]

SECURE_SMTP_PORT = 465


def _resolve_repo_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (_REPO_ROOT / path).resolve()


class MailSettings(BaseSettings):
    """SMTP transport used to deliver the rendered report.

    Every field is optional at load time; completeness is checked per request
    by the mailer so a half-configured deployment still boots.
    """

    host: Optional[str] = Field(default=None, validation_alias="SMTP_HOST")
    port: Optional[int] = Field(default=None, validation_alias="SMTP_PORT")
    user: Optional[str] = Field(default=None, validation_alias="SMTP_USER")
    password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("SMTP_PASS", "SMTP_PASSWORD"),
    )
    sender: Optional[str] = Field(default=None, validation_alias="CONTACT_FROM_EMAIL")
    timeout_s: float = Field(default=30.0, validation_alias="SMTP_TIMEOUT_S")

    model_config = {"extra": "ignore"}

    def missing_fields(self) -> list[str]:
        """Return the environment keys that are unset (never their values)."""
        required = {
            "SMTP_HOST": self.host,
            "SMTP_PORT": self.port,
            "SMTP_USER": self.user,
            "SMTP_PASS": self.password,
            "CONTACT_FROM_EMAIL": self.sender,
        }
        return [key for key, value in required.items() if value in (None, "")]

    @property
    def implicit_tls(self) -> bool:
        return self.port == SECURE_SMTP_PORT


class RenderSettings(BaseSettings):
    """Settings for the headless Chromium render step."""

    executable_override: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PUPPETEER_EXECUTABLE_PATH", "CHROME_EXECUTABLE_PATH"),
    )
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("SHIFTREPORT_ENV", "NODE_ENV"),
    )
    load_timeout_s: float = Field(default=30.0, validation_alias="SHIFTREPORT_RENDER_LOAD_TIMEOUT_S")
    overall_timeout_s: float = Field(default=60.0, validation_alias="SHIFTREPORT_RENDER_TIMEOUT_S")

    model_config = {"extra": "ignore"}

    @property
    def is_production(self) -> bool:
        return (self.environment or "").strip().lower() == "production"


class AssetSettings(BaseSettings):
    """Static assets embedded into the printable document."""

    logo_path: Path = Field(
        default=Path("assets/parte-jefatura-logo.png"),
        validation_alias="SHIFTREPORT_LOGO_PATH",
    )

    model_config = {"extra": "ignore"}

    @model_validator(mode="after")
    def _resolve_paths(self) -> "AssetSettings":
        self.logo_path = _resolve_repo_path(self.logo_path)
        return self


class AuthSettings(BaseSettings):
    """Bearer token accepted by the default session gate."""

    api_token: Optional[str] = Field(default=None, validation_alias="SHIFTREPORT_API_TOKEN")

    model_config = {"extra": "ignore"}
