"""
Pipeline Orchestratore - parse → insight (degradation chain) → report.

Ogni invocazione è un'unità di lavoro isolata e sequenziale: nessuno stato
condiviso tra invocazioni, più file possono essere processati in parallelo.
"""
import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence

from core.config import ProcessorConfig, get_config
from core.logger import log_json, set_request_context
from ingest.csv_parser import ByteSource
from ingest.parser import parse_file
from ingest.text_extract import TextTableHeuristic
from ingest.types import TabularData
from insights.chain import generate_insights
from insights.models import Insights
from insights.remote import RemoteInsightSettings
from reports.assembler import ChartDescriptor, Report, generate_report

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    data: TabularData
    insights: Insights
    insights_source: str
    report: Report
    metrics: Dict[str, Any] = field(default_factory=dict)


def _default_title(file_name: str) -> str:
    stem = file_name.rsplit('.', 1)[0] if '.' in file_name else file_name
    return f"Analysis of {stem}" if stem else "Data Analysis Report"


def run_pipeline(
    file_content: ByteSource,
    file_name: str,
    content_type: Optional[str] = None,
    ext: Optional[str] = None,
    title: Optional[str] = None,
    credential: Optional[str] = None,
    charts: Optional[Sequence[ChartDescriptor]] = None,
    heuristic: Optional[TextTableHeuristic] = None,
    config: Optional[ProcessorConfig] = None,
    client: Optional[Any] = None,
    correlation_id: Optional[str] = None
) -> PipelineResult:
    """
    Esegue la pipeline completa su un file.

    Args:
        file_content: Contenuto file (bytes, file-like o chunk)
        file_name: Nome file
        content_type: Content type dichiarato
        ext: Estensione (se None, da file_name)
        title: Titolo report (default "Analysis of <nome file>")
        credential: API key servizio insight (None = solo statistico)
        charts: Descrittori grafici per la sezione Visualizations
        heuristic: Euristica tabellare per documenti
        config: Configurazione (default get_config())
        client: Client compatibile OpenAI (test)
        correlation_id: ID correlazione per logging (genera se None)

    Returns:
        PipelineResult

    Raises:
        ParseError (EmptyInput, UnsupportedFormat): errori di parsing, terminali
    """
    start_time = time.time()
    config = config or get_config()
    correlation_id = set_request_context(correlation_id=correlation_id, file_name=file_name)

    logger.info(f"[PIPELINE] Starting processing: {file_name}")
    log_json(level='info', message=f"Pipeline started for file: {file_name}", stage='pipeline', ext=ext)

    try:
        data = parse_file(
            file_content,
            file_name,
            content_type=content_type,
            ext=ext,
            heuristic=heuristic,
            config=config
        )
    except Exception as e:
        log_json(
            level='error',
            message=f"Pipeline failed during parse: {str(e)}",
            stage='parse',
            decision='error',
            error_type=type(e).__name__,
            elapsed_ms=(time.time() - start_time) * 1000
        )
        raise

    parse_elapsed_ms = (time.time() - start_time) * 1000

    insights, source = generate_insights(
        data,
        credential=credential,
        settings=RemoteInsightSettings.from_config(config),
        client=client
    )

    report = generate_report(
        title or _default_title(file_name),
        data,
        insights,
        charts=charts,
        max_anomalies=config.report_max_anomalies
    )

    total_elapsed_ms = (time.time() - start_time) * 1000
    metrics = {
        'file_name': file_name,
        'correlation_id': correlation_id,
        'rows': data.row_count,
        'columns': data.column_count,
        'insights_source': source,
        'sections': len(report.sections),
        'parse_elapsed_ms': parse_elapsed_ms,
        'total_elapsed_ms': total_elapsed_ms,
    }

    log_json(
        level='info',
        message=f"Pipeline completed: source={source}, rows={data.row_count}",
        stage='pipeline',
        decision=source,
        rows_total=data.row_count,
        columns_total=data.column_count,
        elapsed_ms=total_elapsed_ms
    )
    logger.info(
        f"[PIPELINE] Completed: {file_name} | rows={data.row_count}, "
        f"insights={source}, elapsed={total_elapsed_ms:.0f}ms"
    )

    return PipelineResult(
        data=data,
        insights=insights,
        insights_source=source,
        report=report,
        metrics=metrics,
    )


async def process_file(*args, **kwargs) -> PipelineResult:
    """Versione awaitable di run_pipeline (eseguita in un thread worker)."""
    return await asyncio.to_thread(run_pipeline, *args, **kwargs)
