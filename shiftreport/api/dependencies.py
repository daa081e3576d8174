"""Dependency injection factories for API endpoints."""

from __future__ import annotations

import secrets
from functools import lru_cache

from fastapi import Depends, HTTPException, Request, status

from config.settings import AssetSettings, AuthSettings, MailSettings, RenderSettings
from observability.logging_config import get_logger
from shiftreport.pipeline import ShiftReportPipeline

logger = get_logger("api_dependencies")

UNAUTHORIZED_DETAIL = "No autorizado."


@lru_cache(maxsize=1)
def get_auth_settings() -> AuthSettings:
    return AuthSettings()


@lru_cache(maxsize=1)
def get_asset_settings() -> AssetSettings:
    return AssetSettings()


def get_mail_settings() -> MailSettings:
    """Read fresh on every request so credentials can be rotated without a restart."""
    return MailSettings()


def get_render_settings() -> RenderSettings:
    return RenderSettings()


def is_session_approved(request: Request) -> bool:
    """Default session gate: a bearer token matching ``SHIFTREPORT_API_TOKEN``.

    Deployments with a real session store override ``require_approved_session``
    instead; this predicate only answers "authenticated and approved".
    """
    expected = (get_auth_settings().api_token or "").strip()
    if not expected:
        return False
    scheme, _, token = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token:
        return False
    return secrets.compare_digest(token.strip().encode(), expected.encode())


def require_approved_session(request: Request) -> None:
    if not is_session_approved(request):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED_DETAIL)


def get_pipeline(
    request: Request,
    mail_settings: MailSettings = Depends(get_mail_settings),  # noqa: B008
    render_settings: RenderSettings = Depends(get_render_settings),  # noqa: B008
    asset_settings: AssetSettings = Depends(get_asset_settings),  # noqa: B008
) -> ShiftReportPipeline:
    """Build a pipeline for this request; rendering never shares a browser across requests."""
    return ShiftReportPipeline(
        mail_settings=mail_settings,
        render_settings=render_settings,
        asset_settings=asset_settings,
        executor=getattr(request.app.state, "io_executor", None),
    )


__all__ = [
    "get_asset_settings",
    "get_auth_settings",
    "get_mail_settings",
    "get_pipeline",
    "get_render_settings",
    "is_session_approved",
    "require_approved_session",
]
