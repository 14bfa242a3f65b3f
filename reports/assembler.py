"""
Report assembler - TabularData + Insights (+ grafici) → Report a sezioni.

Funzione pura: non serializza, non salva, non esporta. Il Report viene
consegnato ai collaboratori esterni (persistenza, export PDF/DOCX).
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from ingest.types import TabularData
from insights.models import Insights

logger = logging.getLogger(__name__)

DEFAULT_MAX_ANOMALIES = 10

NO_SUMMARY = "No summary available."
NO_TRENDS = "No significant trends detected in the dataset."
NO_ANOMALIES = (
    "No significant anomalies detected in the dataset. "
    "Data appears to be within expected ranges."
)
NO_RECOMMENDATIONS = "Continue monitoring the data for patterns and trends."


@dataclass(frozen=True)
class ChartDescriptor:
    type: str
    title: Optional[str] = None

    @property
    def label(self) -> str:
        return self.title or self.type


@dataclass(frozen=True)
class ReportSection:
    heading: str
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"heading": self.heading, "content": self.content}


@dataclass(frozen=True)
class Report:
    title: str
    sections: List[ReportSection]
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "sections": [section.to_dict() for section in self.sections],
            "generatedAt": self.generated_at.isoformat(),
        }


def numbered(items: Sequence[str]) -> str:
    return "\n".join(f"{idx}. {item}" for idx, item in enumerate(items, start=1))


def dataset_overview(data: TabularData) -> str:
    """Nome file da metadata; i conteggi sempre ricalcolati sul contenuto."""
    metadata = data.metadata
    file_name = metadata.file_name if metadata and metadata.file_name else "uploaded file"

    return (
        f"This report analyzes {file_name} containing {data.row_count} rows and {data.column_count} columns. "
        f"The data includes the following fields: {', '.join(data.columns)}."
    )


def generate_report(
    title: str,
    data: TabularData,
    insights: Insights,
    charts: Optional[Sequence[ChartDescriptor]] = None,
    max_anomalies: int = DEFAULT_MAX_ANOMALIES
) -> Report:
    """
    Assembla il report con cinque sezioni fisse più Visualizations opzionale.

    Args:
        title: Titolo report
        data: Modello tabellare analizzato
        insights: Insight (statistici o remoti)
        charts: Descrittori grafici; la sezione Visualizations compare solo se non vuota
        max_anomalies: Anomalie elencate al massimo (default 10)

    Returns:
        Report con generated_at = istante di assemblaggio
    """
    sections = [
        ReportSection("Executive Summary", insights.summary or NO_SUMMARY),
        ReportSection("Dataset Overview", dataset_overview(data)),
        ReportSection("Key Trends", numbered(insights.trends) if insights.trends else NO_TRENDS),
        ReportSection(
            "Data Anomalies",
            numbered(insights.anomalies[:max_anomalies]) if insights.anomalies else NO_ANOMALIES
        ),
        ReportSection(
            "Recommendations",
            numbered(insights.recommendations) if insights.recommendations else NO_RECOMMENDATIONS
        ),
    ]

    if charts:
        labels = ", ".join(chart.label for chart in charts)
        sections.append(ReportSection(
            "Visualizations",
            f"This report includes {len(charts)} visualization(s): {labels}."
        ))

    logger.info(f"[REPORT] Report assembled: '{title}' with {len(sections)} sections")
    return Report(title=title, sections=sections, generated_at=datetime.now(timezone.utc))
