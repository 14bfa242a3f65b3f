"""
Modelli Pydantic per request/response API.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ingest.types import TabularData
from insights.models import Insights
from reports.assembler import ChartDescriptor


class TabularDataBody(BaseModel):
    """Modello tabellare come prodotto da POST /api/files/parse."""
    columns: List[Any] = Field(..., min_length=1, description="Header in ordine")
    rows: List[List[Any]] = Field(..., description="Righe dati (senza header)")
    metadata: Optional[Dict[str, Any]] = Field(
        default=None,
        description="fileName, fileType, rowCount, columnCount"
    )

    def to_tabular(self) -> TabularData:
        return TabularData.from_dict(self.model_dump())


class InsightsBody(BaseModel):
    summary: str = Field(..., min_length=1)
    trends: List[str] = Field(default_factory=list)
    anomalies: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)

    def to_insights(self) -> Insights:
        return Insights.from_dict(self.model_dump())


class ChartBody(BaseModel):
    type: str = Field(..., min_length=1, description="Tipo grafico (bar, line, pie, ...)")
    title: Optional[str] = None

    def to_descriptor(self) -> ChartDescriptor:
        return ChartDescriptor(type=self.type, title=self.title)


class InsightsRequest(BaseModel):
    data: TabularDataBody


class InsightsResponse(InsightsBody):
    source: str = Field(..., description="'remote' o 'statistical'")


class ReportRequest(BaseModel):
    title: str = Field(..., min_length=1)
    data: TabularDataBody
    insights: Optional[InsightsBody] = Field(
        default=None,
        description="Se assente, generati tramite la degradation chain"
    )
    charts: List[ChartBody] = Field(default_factory=list)


class ReportSectionBody(BaseModel):
    heading: str
    content: str


class ReportResponse(BaseModel):
    title: str
    sections: List[ReportSectionBody]
    generatedAt: str
    insightsSource: Optional[str] = None
