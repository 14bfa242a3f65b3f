"""
Insight remoti - generazione insight tramite servizio chat-completion (OpenAI).

Flow:
1. Riassunto testuale limitato del dataset (statistiche + campione righe)
2. Una sola chiamata chat.completions (nessun retry interno)
3. Rimozione eventuali code fence Markdown
4. Validazione rigorosa del contratto JSON prima di fidarsi di qualsiasi campo
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

import openai
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from core.config import ProcessorConfig
from core.exceptions import InvalidInsightsShape, RemoteError
from insights.models import Insights
from insights.statistics import column_stats, detect_numeric_columns
from ingest.types import Cell, TabularData

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a professional data analyst. "
    "Always respond with valid JSON only, no markdown formatting."
)

FENCE_OPEN = re.compile(r'^```[a-zA-Z]*\s*')
FENCE_CLOSE = re.compile(r'\s*```$')

QUOTA_MARKERS = ('quota', '429', 'insufficient_quota', 'rate limit', 'rate_limit')


@dataclass(frozen=True)
class RemoteInsightSettings:
    """Configurazione esplicita della chiamata remota (mai letta dall'ambiente qui)."""
    model: str = "gpt-4o-mini"
    temperature: float = 0.7
    max_tokens: int = 1000
    base_url: Optional[str] = None
    timeout_sec: float = 60.0
    sample_rows: int = 10

    @classmethod
    def from_config(cls, config: ProcessorConfig) -> "RemoteInsightSettings":
        return cls(
            model=config.openai_model,
            temperature=config.openai_temperature,
            max_tokens=config.openai_max_tokens,
            base_url=config.openai_base_url,
            timeout_sec=config.openai_timeout_sec,
            sample_rows=config.insights_sample_rows,
        )


class InsightsPayload(BaseModel):
    """Contratto JSON atteso dal servizio remoto."""

    model_config = ConfigDict(strict=True, extra="ignore")

    summary: Any
    trends: List[Any]
    anomalies: List[Any]
    recommendations: List[Any]

    @field_validator('summary')
    @classmethod
    def validate_summary(cls, v: Any) -> Any:
        if not v:
            raise ValueError("summary mancante o vuoto")
        return v


@dataclass(frozen=True)
class Valid:
    insights: Insights


@dataclass(frozen=True)
class Invalid:
    reason: str


ValidationResult = Union[Valid, Invalid]


def _as_statement(item: Any) -> str:
    if isinstance(item, str):
        return item
    return json.dumps(item, ensure_ascii=False, default=str)


def validate_insights_payload(payload: Any) -> ValidationResult:
    """
    Valida l'oggetto JSON remoto.

    summary deve essere presente e truthy; trends, anomalies e recommendations
    devono essere array (qualsiasi tipo di elemento, convertito a stringa).
    """
    if not isinstance(payload, dict):
        return Invalid(f"atteso oggetto JSON, ricevuto {type(payload).__name__}")

    try:
        model = InsightsPayload.model_validate(payload)
    except ValidationError as e:
        fields = ", ".join(".".join(str(loc) for loc in err["loc"]) for err in e.errors())
        return Invalid(f"campi non validi: {fields}")

    summary = model.summary if isinstance(model.summary, str) else _as_statement(model.summary)
    return Valid(Insights(
        summary=summary,
        trends=[_as_statement(item) for item in model.trends],
        anomalies=[_as_statement(item) for item in model.anomalies],
        recommendations=[_as_statement(item) for item in model.recommendations],
    ))


def _format_cell(value: Cell) -> str:
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def prepare_data_summary(data: TabularData, sample_rows: int = 10) -> str:
    """
    Riassunto testuale limitato del dataset per il prompt.

    Include nome file, conteggi, colonne, statistiche per colonna numerica
    (Mean/Median/Min/Max/Count a due decimali) e le prime sample_rows righe.
    """
    file_name = data.metadata.file_name if data.metadata and data.metadata.file_name else 'Unknown'
    lines = [
        "Dataset Analysis Request:",
        "",
        f"File: {file_name}",
        f"Total Rows: {data.row_count}",
        f"Total Columns: {data.column_count}",
        f"Column Names: {', '.join(data.columns)}",
        "",
    ]

    numeric_columns = detect_numeric_columns(data)
    if numeric_columns:
        lines.append("Numeric Columns Statistics:")
        for col in numeric_columns:
            stats = column_stats(col.values)
            lines.append(
                f"- {col.name}: Mean={stats.mean:.2f}, Median={stats.median:.2f}, "
                f"Min={stats.min:.2f}, Max={stats.max:.2f}, Count={stats.count}"
            )
        lines.append("")

    lines.append(f"Sample Data (first {sample_rows} rows):")
    lines.append(f"Columns: {' | '.join(data.columns)}")
    for idx, row in enumerate(data.rows[:sample_rows]):
        lines.append(f"Row {idx + 1}: {' | '.join(_format_cell(value) for value in row)}")

    return "\n".join(lines) + "\n"


def build_messages(data_summary: str) -> List[Dict[str, str]]:
    prompt = f"""You are a data analyst AI assistant. Analyze the following dataset and provide insights in JSON format with the following structure:
{{
  "summary": "A comprehensive 2-3 sentence summary of the dataset and key findings",
  "trends": ["trend 1", "trend 2", ...],
  "anomalies": ["anomaly 1", "anomaly 2", ...],
  "recommendations": ["recommendation 1", "recommendation 2", ...]
}}

Requirements:
- Provide 2-5 trends if applicable
- Provide 1-5 anomalies if any are detected
- Provide 3-5 actionable recommendations
- Be specific and data-driven
- Use clear, professional language

Dataset Information:
{data_summary}
Respond ONLY with valid JSON, no additional text."""

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def strip_code_fences(text: str) -> str:
    """Rimuove wrapping ```json ... ``` o ``` ... ``` se presente."""
    text = text.strip()
    if text.startswith("```"):
        text = FENCE_OPEN.sub('', text)
        text = FENCE_CLOSE.sub('', text)
    return text.strip()


def is_quota_error(error: Exception) -> bool:
    """Quota/rate limit (HTTP 429 o messaggio relativo alla quota). Solo diagnostica."""
    status = getattr(error, 'status', None) or getattr(error, 'status_code', None)
    if status == 429:
        return True
    text = f"{error} {getattr(error, 'body', '') or ''}".lower()
    return any(marker in text for marker in QUOTA_MARKERS)


def build_client(credential: str, settings: RemoteInsightSettings) -> openai.OpenAI:
    return openai.OpenAI(
        api_key=credential,
        base_url=settings.base_url,
        timeout=settings.timeout_sec,
        max_retries=0,
    )


def _call_service(client: Any, messages: List[Dict[str, str]], settings: RemoteInsightSettings) -> Any:
    try:
        return client.chat.completions.create(
            model=settings.model,
            messages=messages,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
    except openai.APIStatusError as e:
        body = e.response.text if e.response is not None else str(e.body)
        raise RemoteError(f"OpenAI API error: {e.status_code}", status=e.status_code, body=body) from e
    except openai.APIError as e:
        raise RemoteError(f"OpenAI transport error: {e}", body=str(e)) from e
    except Exception as e:
        status = getattr(e, 'status_code', None)
        raise RemoteError(f"Errore chiamata servizio insight: {e}", status=status, body=str(e)) from e


def generate_remote_insights(
    data: TabularData,
    credential: str,
    settings: Optional[RemoteInsightSettings] = None,
    client: Optional[Any] = None
) -> Insights:
    """
    Genera insight tramite il servizio remoto.

    Args:
        data: Modello tabellare
        credential: API key (Bearer)
        settings: Configurazione chiamata (default RemoteInsightSettings())
        client: Client compatibile OpenAI (iniettabile per i test)

    Returns:
        Insights validati

    Raises:
        RemoteError: Errore di trasporto/HTTP
        InvalidInsightsShape: Risposta non conforme al contratto (terminale, nessun retry)
    """
    if not credential or not credential.strip():
        raise RemoteError("Credenziale servizio insight mancante", status=401)

    settings = settings or RemoteInsightSettings()
    client = client or build_client(credential, settings)

    data_summary = prepare_data_summary(data, sample_rows=settings.sample_rows)
    response = _call_service(client, build_messages(data_summary), settings)

    try:
        content = response.choices[0].message.content
    except (AttributeError, IndexError, TypeError) as e:
        raise InvalidInsightsShape("risposta senza choices[0].message.content") from e

    if not content or not str(content).strip():
        raise InvalidInsightsShape("contenuto risposta vuoto")

    result_text = strip_code_fences(str(content))
    try:
        payload = json.loads(result_text)
    except json.JSONDecodeError as e:
        logger.debug(f"[INSIGHT_REMOTE] Risposta AI: {result_text[:500]}")
        raise InvalidInsightsShape(f"JSON non valido ({e.msg})") from e

    result = validate_insights_payload(payload)
    if isinstance(result, Invalid):
        raise InvalidInsightsShape(result.reason)

    logger.info(
        f"[INSIGHT_REMOTE] Insights received: {len(result.insights.trends)} trends, "
        f"{len(result.insights.anomalies)} anomalies, "
        f"{len(result.insights.recommendations)} recommendations"
    )
    return result.insights
