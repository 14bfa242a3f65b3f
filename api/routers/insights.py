"""
Router per generazione insight.

Endpoint:
- POST /api/insights/generate: modello tabellare → insight (remoti con fallback statistico).
"""
import logging

from fastapi import APIRouter

from api.models import InsightsRequest, InsightsResponse
from core.config import get_config
from insights.chain import generate_insights_async
from insights.remote import RemoteInsightSettings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["insights"])


@router.post("/generate", response_model=InsightsResponse)
async def generate_insights_endpoint(request: InsightsRequest):
    """
    Genera insight per il dataset.

    La credenziale arriva dalla configurazione (OPENAI_API_KEY); se assente si
    usano direttamente gli insight statistici.
    """
    config = get_config()
    data = request.data.to_tabular()

    insights, source = await generate_insights_async(
        data,
        credential=config.openai_api_key,
        settings=RemoteInsightSettings.from_config(config)
    )
    logger.info(f"[INSIGHTS_API] Insights generated: source={source}, rows={data.row_count}")

    return InsightsResponse(source=source, **insights.to_dict())
