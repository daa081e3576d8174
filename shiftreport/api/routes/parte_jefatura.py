"""Shift-lead report ("parte de jefatura") route handlers."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from config.settings import AssetSettings
from shiftreport.api.cancellation import run_until_disconnect
from shiftreport.api.dependencies import (
    get_asset_settings,
    get_pipeline,
    require_approved_session,
)
from shiftreport.api.schemas import ErrorResponse, MailSentResponse, ShiftReportRequest
from shiftreport.pipeline import ShiftReportPipeline

router = APIRouter(prefix="/api/parte-jefatura", tags=["parte-jefatura"])

_session_dep = Depends(require_approved_session)
_pipeline_dep = Depends(get_pipeline)
_asset_settings_dep = Depends(get_asset_settings)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


@router.post(
    "/mail",
    response_model=MailSentResponse,
    responses=_ERROR_RESPONSES,
    dependencies=[_session_dep],
)
async def mail_shift_report(
    request: Request,
    body: ShiftReportRequest,
    pipeline: ShiftReportPipeline = _pipeline_dep,
) -> MailSentResponse:
    """Render the report to PDF and mail it to ``email``.

    Pipeline errors propagate to the exception handlers registered in
    ``fastapi_app`` which map them to 400/500 JSON bodies.
    """
    receipt = await run_until_disconnect(request, pipeline.run(body.model_dump()))
    return MailSentResponse(ok=True, messageId=receipt.message_id)


@router.get("/logo", dependencies=[_session_dep])
def get_logo(settings: AssetSettings = _asset_settings_dep) -> Response:
    """Serve the header logo used in the printable report."""
    try:
        payload = settings.logo_path.read_bytes()
    except OSError as exc:
        raise HTTPException(status_code=404, detail="Logo no disponible.") from exc
    return Response(
        content=payload,
        media_type="image/png",
        headers={"Cache-Control": "private, max-age=0, no-store"},
    )


__all__ = ["router"]
