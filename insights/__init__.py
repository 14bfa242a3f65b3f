"""
Insight: engine statistico, generatore remoto e degradation chain.
"""
from insights.chain import generate_insights, generate_insights_async
from insights.engine import generate_statistical_insights
from insights.models import Insights

__all__ = [
    "Insights",
    "generate_insights",
    "generate_insights_async",
    "generate_statistical_insights",
]
