"""
Engine statistico per insight (rule-based).

Funzione pura TabularData → Insights: deterministica, nessun I/O.
Le quattro analisi (summary, trend, anomalie, raccomandazioni) sono indipendenti.
"""
import logging
from typing import List

from ingest.types import TabularData
from insights.models import Insights, NumericColumn
from insights.statistics import column_stats, detect_numeric_columns

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 0.10
ANOMALY_STD_MULTIPLIER = 2
SMALL_DATASET_ROWS = 10
LARGE_DATASET_ROWS = 1000


def build_summary(data: TabularData, numeric_columns: List[NumericColumn]) -> str:
    parts = [f"The dataset contains {data.row_count} rows and {data.column_count} columns."]

    if numeric_columns:
        parts.append(f"Found {len(numeric_columns)} numeric column(s) suitable for analysis.")
        for col in numeric_columns:
            stats = column_stats(col.values)
            parts.append(f"{col.name}: mean {stats.mean:.2f}, range {stats.min:.2f}-{stats.max:.2f}.")

    return " ".join(parts)


def detect_trend(col: NumericColumn) -> str:
    """
    Confronta la media della seconda metà con quella della prima (split a len // 2).

    Variazione relativa rispetto a |media prima metà|: oltre +10% upward, sotto
    -10% downward, altrimenti stable. Con media iniziale zero decide il segno
    della seconda media.
    """
    mid = len(col.values) // 2
    first_half, second_half = col.values[:mid], col.values[mid:]
    first_avg = sum(first_half) / len(first_half)
    second_avg = sum(second_half) / len(second_half)

    if first_avg == 0:
        if second_avg > 0:
            return f"{col.name} shows an upward trend (from a zero baseline)."
        if second_avg < 0:
            return f"{col.name} shows a downward trend (from a zero baseline)."
        return f"{col.name} remains relatively stable."

    change = (second_avg - first_avg) / abs(first_avg)
    if change > TREND_THRESHOLD:
        return f"{col.name} shows an upward trend ({change * 100:.1f}% increase)."
    if change < -TREND_THRESHOLD:
        return f"{col.name} shows a downward trend ({-change * 100:.1f}% decrease)."
    return f"{col.name} remains relatively stable."


def detect_trends(numeric_columns: List[NumericColumn]) -> List[str]:
    """Una frase per ogni colonna numerica con almeno 2 valori."""
    return [detect_trend(col) for col in numeric_columns if len(col.values) >= 2]


def detect_anomalies(numeric_columns: List[NumericColumn]) -> List[str]:
    """
    Valori oltre 2 deviazioni standard dalla media, su tutte le colonne.

    Nessun limite qui: il troncamento avviene nel report.
    La riga citata è 1-based sul file sorgente (header = riga 1).
    """
    anomalies: List[str] = []

    for col in numeric_columns:
        stats = column_stats(col.values)
        threshold = stats.std * ANOMALY_STD_MULTIPLIER
        low, high = stats.mean - threshold, stats.mean + threshold

        for value, row_index in zip(col.values, col.row_indices):
            if abs(value - stats.mean) > threshold:
                anomalies.append(
                    f"Anomaly detected in {col.name} at row {row_index + 2}: {value:.2f} "
                    f"(expected range: {low:.2f} - {high:.2f})."
                )

    return anomalies


def build_recommendations(
    data: TabularData,
    numeric_columns: List[NumericColumn],
    trends: List[str],
    anomalies: List[str]
) -> List[str]:
    recommendations: List[str] = []

    if not numeric_columns:
        recommendations.append(
            "Consider including numeric columns for more advanced analysis and visualization."
        )

    if data.row_count < SMALL_DATASET_ROWS:
        recommendations.append(
            "Small dataset detected. Consider collecting more data points for more reliable insights."
        )
    elif data.row_count > LARGE_DATASET_ROWS:
        recommendations.append(
            "Large dataset detected. Consider using sampling techniques for faster analysis."
        )

    if len(numeric_columns) >= 2:
        recommendations.append(
            "Multiple numeric columns found. Consider creating correlation analysis between variables."
        )

    if any("trend" in trend for trend in trends):
        recommendations.append(
            "Trends detected. Consider implementing time-series analysis for deeper insights."
        )

    if anomalies:
        recommendations.append(
            "Anomalies detected. Review these data points for potential data quality issues "
            "or interesting patterns."
        )

    if not recommendations:
        recommendations.append(
            "Data structure looks good. Explore different visualization types to uncover hidden patterns."
        )
        recommendations.append(
            "Consider exporting your analysis as a report for sharing and documentation."
        )

    return recommendations


def generate_statistical_insights(data: TabularData) -> Insights:
    """
    Genera insight rule-based da un TabularData.

    Args:
        data: Modello tabellare

    Returns:
        Insights con summary sempre non vuoto
    """
    numeric_columns = detect_numeric_columns(data)

    summary = build_summary(data, numeric_columns)
    trends = detect_trends(numeric_columns)
    anomalies = detect_anomalies(numeric_columns)
    recommendations = build_recommendations(data, numeric_columns, trends, anomalies)

    logger.debug(
        f"[INSIGHT_ENGINE] {len(numeric_columns)} numeric columns, {len(trends)} trends, "
        f"{len(anomalies)} anomalies, {len(recommendations)} recommendations"
    )

    return Insights(
        summary=summary,
        trends=trends,
        anomalies=anomalies,
        recommendations=recommendations,
    )
