"""
Test unitari per engine statistico e statistiche di colonna.
"""
import math

import pytest

from ingest.types import TabularData, build_tabular
from insights.engine import (
    detect_anomalies,
    detect_trend,
    generate_statistical_insights,
)
from insights.models import NumericColumn
from insights.statistics import column_stats, detect_numeric_columns, to_number


def _column(values, name="X"):
    return NumericColumn(
        name=name, index=0, values=[float(v) for v in values], row_indices=list(range(len(values)))
    )


def _table(columns, rows, file_name="data.csv"):
    return build_tabular(columns, rows, file_name, "text/csv")


class TestToNumber:

    @pytest.mark.parametrize("value,expected", [
        ("12", 12.0),
        (" 3.5 ", 3.5),
        ("-2e3", -2000.0),
        (7, 7.0),
        (1.25, 1.25),
    ])
    def test_numeric(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize("value", [
        None, "", "   ", "abc", "12abc", "1_000", True, False, "nan", "inf", float("nan"),
    ])
    def test_not_numeric(self, value):
        assert to_number(value) is None


class TestColumnStatistics:

    def test_detect_numeric_columns_skips_blanks(self):
        data = _table(["Name", "Qty"], [["a", "1"], ["b", ""], ["c", "x"], ["d", "3"]])
        columns = detect_numeric_columns(data)

        assert len(columns) == 1
        assert columns[0].name == "Qty"
        assert columns[0].index == 1
        assert columns[0].values == [1.0, 3.0]
        assert columns[0].row_indices == [0, 3]

    def test_short_rows_are_missing_cells(self):
        data = _table(["A", "B"], [["1"], ["2", "5"]])
        columns = detect_numeric_columns(data)

        assert [c.name for c in columns] == ["A", "B"]
        assert columns[1].values == [5.0]

    def test_population_std(self):
        stats = column_stats([2, 4, 4, 4, 5, 5, 7, 9])

        assert stats.mean == 5.0
        assert stats.median == 4.5
        assert stats.std == 2.0
        assert stats.min == 2.0
        assert stats.max == 9.0
        assert stats.count == 8


class TestSummary:

    def test_summary_with_numeric_columns(self, sample_tabular):
        insights = generate_statistical_insights(sample_tabular)

        assert insights.summary == (
            "The dataset contains 6 rows and 3 columns. "
            "Found 1 numeric column(s) suitable for analysis. "
            "Sales: mean 150.00, range 100.00-200.00."
        )

    def test_summary_without_numeric_columns(self):
        data = _table(["Name"], [["a"], ["b"]])
        insights = generate_statistical_insights(data)

        assert insights.summary == "The dataset contains 2 rows and 1 columns."

    def test_summary_for_header_only(self):
        insights = generate_statistical_insights(_table(["A", "B"], []))

        assert insights.summary == "The dataset contains 0 rows and 2 columns."
        assert insights.trends == []
        assert insights.anomalies == []


class TestTrends:

    def test_upward_trend(self):
        assert detect_trend(_column([100, 100, 100, 200, 200, 200], "Sales")) == (
            "Sales shows an upward trend (100.0% increase)."
        )

    def test_downward_trend(self):
        assert detect_trend(_column([200, 200, 100, 100], "Cost")) == (
            "Cost shows a downward trend (50.0% decrease)."
        )

    def test_stable(self):
        assert detect_trend(_column([100, 104, 98, 105])) == "X remains relatively stable."

    def test_odd_length_split(self):
        """Split a len // 2: la seconda metà contiene il valore centrale."""
        # prima metà [10], seconda [10, 40] → media 25 → +150%
        assert detect_trend(_column([10, 10, 40])) == "X shows an upward trend (150.0% increase)."

    def test_negative_baseline_uses_absolute_value(self):
        # -100 → -50: variazione +50% rispetto a |−100|
        assert detect_trend(_column([-100, -50])) == "X shows an upward trend (50.0% increase)."

    def test_zero_baseline(self):
        assert detect_trend(_column([0, 0, 5, 5])) == "X shows an upward trend (from a zero baseline)."
        assert detect_trend(_column([0, -5])) == "X shows a downward trend (from a zero baseline)."
        assert detect_trend(_column([0, 0])) == "X remains relatively stable."

    def test_single_value_has_no_trend(self):
        data = _table(["X"], [["5"]])
        assert generate_statistical_insights(data).trends == []


class TestAnomalies:

    def test_outlier_detected(self, outlier_tabular):
        insights = generate_statistical_insights(outlier_tabular)

        assert insights.anomalies == [
            "Anomaly detected in X at row 5: 100.00 (expected range: -42.08 - 92.08)."
        ]

    def test_row_number_counts_skipped_cells(self):
        """Celle vuote prima dell'outlier non spostano il numero di riga."""
        data = _table(["X"], [["10"], [""], ["10"], ["10"], ["100"], ["10"], ["10"]])
        insights = generate_statistical_insights(data)

        assert insights.anomalies == [
            "Anomaly detected in X at row 6: 100.00 (expected range: -42.08 - 92.08)."
        ]

    def test_constant_column_has_no_anomalies(self):
        assert detect_anomalies([_column([7] * 20)]) == []

    def test_uniform_data_has_no_anomalies(self, sample_tabular):
        assert generate_statistical_insights(sample_tabular).anomalies == []

    def test_anomalies_not_capped(self):
        values = [0] * 500 + [1000] * 12
        anomalies = detect_anomalies([_column(values)])

        assert len(anomalies) == 12


class TestRecommendations:

    def test_no_numeric_columns(self):
        data = _table(["Name"], [[f"n{i}"] for i in range(20)])
        recommendations = generate_statistical_insights(data).recommendations

        assert recommendations == [
            "Consider including numeric columns for more advanced analysis and visualization."
        ]

    def test_small_dataset_with_trend(self, sample_tabular):
        recommendations = generate_statistical_insights(sample_tabular).recommendations

        assert recommendations == [
            "Small dataset detected. Consider collecting more data points for more reliable insights.",
            "Trends detected. Consider implementing time-series analysis for deeper insights.",
        ]

    def test_anomalies_and_multiple_columns(self):
        rows = [[str(i % 3), "10"] for i in range(20)]
        rows.append(["1", "500"])
        data = _table(["A", "B"], rows)
        recommendations = generate_statistical_insights(data).recommendations

        assert "Multiple numeric columns found. Consider creating correlation analysis between variables." in recommendations
        assert (
            "Anomalies detected. Review these data points for potential data quality issues "
            "or interesting patterns."
        ) in recommendations

    def test_large_dataset(self):
        data = _table(["Name"], [[f"n{i}"] for i in range(1001)])
        recommendations = generate_statistical_insights(data).recommendations

        assert "Large dataset detected. Consider using sampling techniques for faster analysis." in recommendations

    def test_stable_data_uses_default_recommendations(self):
        """'remains relatively stable' non contiene 'trend': nessuna raccomandazione trend."""
        data = _table(["X"], [["10"]] * 12)
        recommendations = generate_statistical_insights(data).recommendations

        assert recommendations == [
            "Data structure looks good. Explore different visualization types to uncover hidden patterns.",
            "Consider exporting your analysis as a report for sharing and documentation.",
        ]


class TestDeterminism:

    def test_same_input_same_output(self, outlier_tabular):
        first = generate_statistical_insights(outlier_tabular)
        second = generate_statistical_insights(outlier_tabular)

        assert first == second

    def test_summary_never_empty(self):
        data = TabularData(columns=["A"], rows=[])
        assert generate_statistical_insights(data).summary

    def test_stats_are_finite(self, outlier_tabular):
        stats = column_stats(detect_numeric_columns(outlier_tabular)[0].values)
        assert all(math.isfinite(v) for v in (stats.mean, stats.median, stats.std))
