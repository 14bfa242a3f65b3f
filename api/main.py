"""
Main FastAPI application per insight-processor.

Espone parsing file, generazione insight e assemblaggio report.
"""
import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.routers import files, insights, reports
from core.config import get_config, validate_config
from core.exceptions import EmptyInput, InsightsUnavailable, ParseError, UnsupportedFormat
from core.logger import get_correlation_id, setup_colored_logging

# Configurazione logging colorato
setup_colored_logging("processor")
logger = logging.getLogger(__name__)

app = FastAPI(title="Insight Processor", version=get_config().processor_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(files.router)  # /api/files/*
app.include_router(insights.router)  # /api/insights/*
app.include_router(reports.router)  # /api/reports/*


def _error_response(status_code: int, error: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": type(error).__name__,
            "detail": str(error),
            "correlation_id": get_correlation_id(),
        }
    )


@app.exception_handler(ParseError)
async def parse_error_handler(request: Request, exc: ParseError):
    """UnsupportedFormat → 415, EmptyInput e altri errori di parsing → 400."""
    if isinstance(exc, UnsupportedFormat):
        status_code = 415
    else:
        status_code = 400
    level = logging.INFO if isinstance(exc, EmptyInput) else logging.WARNING
    logger.log(level, f"[API] Parse error on {request.url.path}: {exc}")
    return _error_response(status_code, exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Body non conforme ai modelli → 400."""
    logger.warning(f"[API] Invalid request body on {request.url.path}: {len(exc.errors())} errors")
    return JSONResponse(
        status_code=400,
        content={
            "error": "ValidationError",
            "detail": jsonable_encoder(exc.errors()),
            "correlation_id": get_correlation_id(),
        }
    )


@app.exception_handler(InsightsUnavailable)
async def insights_unavailable_handler(request: Request, exc: InsightsUnavailable):
    logger.error(f"[API] Insights unavailable on {request.url.path}: {exc}")
    return _error_response(500, exc)


@app.on_event("startup")
async def startup_event():
    """Valida configurazione al startup"""
    config = get_config()
    validate_config()

    if config.has_openai_credential():
        logger.info(f"OpenAI API key configured - remote insights enabled (model={config.openai_model})")
    else:
        logger.warning("OpenAI API key not found - statistical insights only")


@app.get("/health")
async def health_check():
    """Health check del servizio"""
    config = get_config()
    return {
        "status": "healthy",
        "service": config.processor_name,
        "version": config.processor_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "openai": "configured" if config.has_openai_credential() else "not_configured",
        "features": {
            "ocr_enabled": config.ocr_enabled,
        },
        "endpoints": {
            "parse": "/api/files/parse",
            "insights": "/api/insights/generate",
            "report": "/api/reports/generate",
            "report_from_file": "/api/reports/from-file",
        }
    }
