"""
Data models per gli insight.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class Insights:
    """
    Insight prodotti dall'engine statistico o da una risposta remota validata.

    summary è sempre non vuoto; trends/anomalies/recommendations sono in ordine
    di generazione e possono essere vuoti.
    """
    summary: str
    trends: List[str] = field(default_factory=list)
    anomalies: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary,
            "trends": list(self.trends),
            "anomalies": list(self.anomalies),
            "recommendations": list(self.recommendations),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Insights":
        return cls(
            summary=str(data.get("summary") or ""),
            trends=[str(item) for item in data.get("trends") or []],
            anomalies=[str(item) for item in data.get("anomalies") or []],
            recommendations=[str(item) for item in data.get("recommendations") or []],
        )


@dataclass(frozen=True)
class NumericColumn:
    """
    Colonna con almeno un valore numerico finito (values mai vuoto).

    row_indices[i] è l'indice 0-based in data.rows della riga da cui proviene values[i].
    """
    name: str
    index: int
    values: List[float]
    row_indices: List[int]


@dataclass(frozen=True)
class ColumnStats:
    mean: float
    median: float
    std: float
    min: float
    max: float
    count: int
