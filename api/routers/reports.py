"""
Router per assemblaggio report.

Endpoint:
- POST /api/reports/generate: modello tabellare (+ insight, grafici) → report a sezioni
- POST /api/reports/from-file: file multipart → pipeline completa → report
"""
import logging
from typing import Optional

from fastapi import APIRouter, File, Form, UploadFile

from api.models import ReportRequest, ReportResponse
from api.routers.files import read_upload
from core.config import get_config
from ingest.pipeline import process_file
from insights.chain import generate_insights_async
from insights.remote import RemoteInsightSettings
from reports.assembler import generate_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.post("/generate", response_model=ReportResponse)
async def generate_report_endpoint(request: ReportRequest):
    """
    Assembla il report. Se gli insight non sono forniti vengono generati
    tramite la degradation chain.
    """
    config = get_config()
    data = request.data.to_tabular()

    source: Optional[str] = None
    if request.insights is not None:
        insights = request.insights.to_insights()
    else:
        insights, source = await generate_insights_async(
            data,
            credential=config.openai_api_key,
            settings=RemoteInsightSettings.from_config(config)
        )

    report = generate_report(
        request.title,
        data,
        insights,
        charts=[chart.to_descriptor() for chart in request.charts],
        max_anomalies=config.report_max_anomalies
    )
    return ReportResponse(insightsSource=source, **report.to_dict())


@router.post("/from-file", response_model=ReportResponse)
async def report_from_file_endpoint(
    file: UploadFile = File(...),
    title: Optional[str] = Form(None)
):
    """Pipeline completa su un file caricato: parse → insight → report."""
    config = get_config()
    content = await read_upload(file, config.max_upload_mb)

    result = await process_file(
        content,
        file.filename or "",
        content_type=file.content_type,
        title=title,
        credential=config.openai_api_key,
        config=config
    )
    return ReportResponse(insightsSource=result.insights_source, **result.report.to_dict())
