"""
Degradation chain per la generazione insight.

Stati (nessun retry, avanzamento solo in avanti):
- nessuna credenziale → engine statistico (terminale)
- credenziale → servizio remoto → [successo: terminale] | [errore: engine statistico]
- errore inatteso → engine statistico sull'input originale; senza input → errore terminale

La chain ritorna sempre Insights validati oppure propaga un unico errore.
"""
import asyncio
import logging
import time
from typing import Any, Optional, Tuple

from core.exceptions import InsightsUnavailable, InvalidInsightsShape, RemoteError
from core.logger import log_json
from ingest.types import TabularData
from insights.engine import generate_statistical_insights
from insights.models import Insights
from insights.remote import RemoteInsightSettings, generate_remote_insights, is_quota_error

logger = logging.getLogger(__name__)

SOURCE_STATISTICAL = "statistical"
SOURCE_REMOTE = "remote"


def has_credential(credential: Optional[str]) -> bool:
    return bool(credential and credential.strip())


def generate_insights(
    data: Optional[TabularData],
    credential: Optional[str] = None,
    settings: Optional[RemoteInsightSettings] = None,
    client: Optional[Any] = None
) -> Tuple[Insights, str]:
    """
    Genera insight con fallback sull'engine statistico.

    Args:
        data: Modello tabellare
        credential: API key servizio remoto (None = stato valido, solo statistico)
        settings: Configurazione chiamata remota
        client: Client compatibile OpenAI (iniettabile per i test)

    Returns:
        Tuple (insights, source):
        - insights: Insights validati
        - source: 'remote' o 'statistical'

    Raises:
        InsightsUnavailable: Nessun input disponibile per il fallback
    """
    start_time = time.time()

    if data is None:
        logger.error("[INSIGHT_CHAIN] No input data available, cannot generate insights")
        raise InsightsUnavailable("Nessun dato disponibile per generare insight")

    if not has_credential(credential):
        logger.info("[INSIGHT_CHAIN] No credential configured, using statistical engine")
        insights = generate_statistical_insights(data)
        _log_outcome(SOURCE_STATISTICAL, "statistical", start_time)
        return insights, SOURCE_STATISTICAL

    try:
        insights = generate_remote_insights(data, credential, settings=settings, client=client)
    except (RemoteError, InvalidInsightsShape) as e:
        if is_quota_error(e):
            logger.warning(f"[INSIGHT_CHAIN] Quota exceeded, falling back to statistical insights: {e}")
        else:
            logger.error(f"[INSIGHT_CHAIN] Remote insights failed, falling back to statistical insights: {e}")
    except Exception as e:
        logger.error(f"[INSIGHT_CHAIN] Unexpected error, falling back to statistical insights: {e}", exc_info=True)
    else:
        _log_outcome(SOURCE_REMOTE, "remote", start_time)
        return insights, SOURCE_REMOTE

    insights = generate_statistical_insights(data)
    _log_outcome(SOURCE_STATISTICAL, "fallback", start_time)
    return insights, SOURCE_STATISTICAL


async def generate_insights_async(
    data: Optional[TabularData],
    credential: Optional[str] = None,
    settings: Optional[RemoteInsightSettings] = None,
    client: Optional[Any] = None
) -> Tuple[Insights, str]:
    """Stessa semantica di generate_insights, eseguita fuori dall'event loop."""
    return await asyncio.to_thread(generate_insights, data, credential, settings, client)


def _log_outcome(source: str, decision: str, start_time: float) -> None:
    log_json(
        level='info',
        message=f"Insights generated: source={source}",
        stage='insights',
        decision=decision,
        elapsed_ms=(time.time() - start_time) * 1000
    )
