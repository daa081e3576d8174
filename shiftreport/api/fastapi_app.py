"""FastAPI application wiring for the shift-report service."""

# ruff: noqa: E402

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException


def _truthy_env(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes")


# Prefer explicitly-exported environment variables over values in `.env`.
# Tests opt out with `SHIFTREPORT_SKIP_DOTENV=1`.
if not _truthy_env("SHIFTREPORT_SKIP_DOTENV"):
    try:
        load_dotenv(dotenv_path=Path(__file__).resolve().parents[2] / ".env", override=False)
    except OSError as e:
        logging.getLogger(__name__).warning(
            "Failed to load .env via python-dotenv (%s); proceeding with OS env only",
            type(e).__name__,
        )

from config.startup_settings import validate_startup_env
from observability.logging_config import configure_logging, get_logger
from shiftreport.api.routes.metrics import router as metrics_router
from shiftreport.api.routes.parte_jefatura import router as parte_jefatura_router
from shiftreport.common.exceptions import (
    ConfigurationError,
    DeliveryError,
    RenderError,
    ShiftReportError,
    ValidationError,
)

logger = get_logger(__name__)

SEND_FAILED = "Error enviando email."
MAIL_NOT_CONFIGURED = "Email no configurado"
RENDER_FAILED_DETAILS = "No se pudo generar el PDF."
DELIVERY_FAILED_DETAILS = "El servidor de correo no aceptó el envío."
UNEXPECTED_FAILURE_DETAILS = "Error interno del servidor."
INVALID_EMAIL = "Email inválido."
INVALID_JSON = "Cuerpo de la petición no es JSON válido."

IO_WORKERS = int(os.getenv("SHIFTREPORT_IO_WORKERS", "4"))


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Validate the environment and own the thread pool used for SMTP sends."""
    configure_logging()
    validate_startup_env()
    app.state.io_executor = ThreadPoolExecutor(
        max_workers=max(1, IO_WORKERS), thread_name_prefix="smtp"
    )
    logger.info("Shift report service started")

    yield

    io_executor = getattr(app.state, "io_executor", None)
    if io_executor is not None:
        io_executor.shutdown(wait=False, cancel_futures=True)


app = FastAPI(
    title="Shift Report API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        origin.strip()
        for origin in os.getenv("SHIFTREPORT_CORS_ORIGINS", "").split(",")
        if origin.strip()
    ],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Authorization", "Content-Type"],
)


@app.exception_handler(ValidationError)
async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.info("Report rejected", extra={"field": exc.field, "path": request.url.path})
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(ConfigurationError)
async def _configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("Mail transport not configured", extra={"missing": exc.missing})
    return JSONResponse(status_code=500, content={"error": MAIL_NOT_CONFIGURED})


@app.exception_handler(ShiftReportError)
async def _pipeline_error_handler(request: Request, exc: ShiftReportError) -> JSONResponse:
    if isinstance(exc, RenderError):
        details = RENDER_FAILED_DETAILS
    elif isinstance(exc, DeliveryError):
        details = DELIVERY_FAILED_DETAILS
    else:
        details = None
    logger.error(
        "Shift report failed",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={
            "error_type": type(exc).__name__,
            "smtp_code": getattr(exc, "smtp_code", None),
            "smtp_response": getattr(exc, "smtp_response", None),
        },
    )
    content = {"error": SEND_FAILED}
    if details:
        content["details"] = details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def _request_body_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # A body that is not a JSON object carries no usable email.
    kinds = {error.get("type") for error in exc.errors()}
    message = INVALID_JSON if "json_invalid" in kinds else INVALID_EMAIL
    logger.info("Report body rejected", extra={"error_types": sorted(kinds), "path": request.url.path})
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error while sending shift report",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"error_type": type(exc).__name__, "path": request.url.path},
    )
    return JSONResponse(
        status_code=500,
        content={"error": SEND_FAILED, "details": UNEXPECTED_FAILURE_DETAILS},
    )


@app.exception_handler(StarletteHTTPException)
async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.include_router(parte_jefatura_router)
app.include_router(metrics_router, tags=["metrics"])


@app.get("/health")
async def health() -> dict[str, bool]:
    # Liveness probe: keep payload stable and minimal.
    return {"ok": True}


__all__ = ["app"]
