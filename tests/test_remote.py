"""
Test unitari per generatore insight remoto (client OpenAI mockato).
"""
import openai
import pytest

from core.exceptions import InvalidInsightsShape, RemoteError
from insights.models import Insights
from insights.remote import (
    SYSTEM_PROMPT,
    Invalid,
    RemoteInsightSettings,
    Valid,
    build_client,
    build_messages,
    generate_remote_insights,
    is_quota_error,
    prepare_data_summary,
    strip_code_fences,
    validate_insights_payload,
)
from tests.mocks import DEFAULT_INSIGHTS, create_mock_openai_client


class TestDataSummary:
    """Test per riassunto dataset nel prompt."""

    def test_summary_contents(self, sample_tabular):
        summary = prepare_data_summary(sample_tabular)

        assert "File: sales.csv" in summary
        assert "Total Rows: 6" in summary
        assert "Total Columns: 3" in summary
        assert "Column Names: Month, Sales, Region" in summary
        assert "- Sales: Mean=150.00, Median=150.00, Min=100.00, Max=200.00, Count=6" in summary
        assert "Row 1: Jan | 100 | North" in summary

    def test_sample_rows_limit(self, sample_tabular):
        summary = prepare_data_summary(sample_tabular, sample_rows=2)

        assert "Sample Data (first 2 rows):" in summary
        assert "Row 2:" in summary
        assert "Row 3:" not in summary

    def test_no_numeric_section_for_text_data(self):
        from ingest.types import TabularData

        summary = prepare_data_summary(TabularData(columns=["Name"], rows=[["a"]]))

        assert "File: Unknown" in summary
        assert "Numeric Columns Statistics" not in summary

    def test_messages(self, sample_tabular):
        messages = build_messages(prepare_data_summary(sample_tabular))

        assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT}
        assert messages[1]["role"] == "user"
        assert "Total Rows: 6" in messages[1]["content"]
        assert '"summary"' in messages[1]["content"]


class TestPayloadValidation:
    """Test per validazione contratto JSON."""

    def test_valid_payload(self):
        result = validate_insights_payload(DEFAULT_INSIGHTS)

        assert isinstance(result, Valid)
        assert result.insights.summary == DEFAULT_INSIGHTS["summary"]
        assert result.insights.recommendations == DEFAULT_INSIGHTS["recommendations"]

    def test_non_string_items_are_stringified(self):
        result = validate_insights_payload({
            "summary": "ok",
            "trends": [{"column": "Sales", "direction": "up"}],
            "anomalies": [42],
            "recommendations": [],
        })

        assert isinstance(result, Valid)
        assert result.insights.trends == ['{"column": "Sales", "direction": "up"}']
        assert result.insights.anomalies == ["42"]

    @pytest.mark.parametrize("payload", [
        ["not", "an", "object"],
        "text",
        {"trends": [], "anomalies": [], "recommendations": []},
        {"summary": "", "trends": [], "anomalies": [], "recommendations": []},
        {"summary": "ok", "trends": "up", "anomalies": [], "recommendations": []},
        {"summary": "ok", "trends": [], "anomalies": []},
        {"summary": "ok", "trends": [], "anomalies": None, "recommendations": []},
    ])
    def test_invalid_payloads(self, payload):
        assert isinstance(validate_insights_payload(payload), Invalid)

    def test_invalid_reason_names_field(self):
        result = validate_insights_payload(
            {"summary": "ok", "trends": "up", "anomalies": [], "recommendations": []}
        )
        assert "trends" in result.reason


class TestCodeFences:

    @pytest.mark.parametrize("text,expected", [
        ('```json\n{"a": 1}\n```', '{"a": 1}'),
        ('```\n{"a": 1}\n```', '{"a": 1}'),
        ('  {"a": 1}  ', '{"a": 1}'),
    ])
    def test_strip(self, text, expected):
        assert strip_code_fences(text) == expected


class TestGenerateRemoteInsights:
    """Test per chiamata remota."""

    def test_success(self, sample_tabular):
        client = create_mock_openai_client("success")
        settings = RemoteInsightSettings(model="gpt-test", temperature=0.2, max_tokens=500)

        insights = generate_remote_insights(sample_tabular, "sk-test", settings=settings, client=client)

        assert isinstance(insights, Insights)
        assert insights.summary == DEFAULT_INSIGHTS["summary"]
        kwargs = client.create_mock.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["temperature"] == 0.2
        assert kwargs["max_tokens"] == 500
        assert kwargs["messages"][0]["role"] == "system"
        client.create_mock.assert_called_once()

    def test_fenced_response(self, sample_tabular):
        client = create_mock_openai_client("fenced")
        insights = generate_remote_insights(sample_tabular, "sk-test", client=client)

        assert insights.trends == DEFAULT_INSIGHTS["trends"]

    @pytest.mark.parametrize("mode", ["malformed", "empty", "invalid_shape"])
    def test_invalid_shape(self, sample_tabular, mode):
        client = create_mock_openai_client(mode)

        with pytest.raises(InvalidInsightsShape):
            generate_remote_insights(sample_tabular, "sk-test", client=client)
        client.create_mock.assert_called_once()

    def test_generic_error(self, sample_tabular):
        client = create_mock_openai_client("error")

        with pytest.raises(RemoteError) as exc_info:
            generate_remote_insights(sample_tabular, "sk-test", client=client)
        assert exc_info.value.status is None
        assert "OpenAI API Error" in exc_info.value.body

    def test_server_error_status(self, sample_tabular):
        client = create_mock_openai_client("server_error")

        with pytest.raises(RemoteError) as exc_info:
            generate_remote_insights(sample_tabular, "sk-test", client=client)
        assert exc_info.value.status == 500
        assert "boom" in exc_info.value.body
        assert not is_quota_error(exc_info.value)

    def test_rate_limit_is_quota_error(self, sample_tabular):
        client = create_mock_openai_client("rate_limit")

        with pytest.raises(RemoteError) as exc_info:
            generate_remote_insights(sample_tabular, "sk-test", client=client)
        assert exc_info.value.status == 429
        assert is_quota_error(exc_info.value)

    def test_missing_credential(self, sample_tabular):
        client = create_mock_openai_client("success")

        with pytest.raises(RemoteError) as exc_info:
            generate_remote_insights(sample_tabular, "  ", client=client)
        assert exc_info.value.status == 401
        client.create_mock.assert_not_called()


class TestQuotaDetection:

    def test_quota_message(self):
        assert is_quota_error(Exception("You exceeded your current quota"))

    def test_other_error(self):
        assert not is_quota_error(Exception("connection reset"))


class TestBuildClient:

    def test_no_internal_retries(self):
        settings = RemoteInsightSettings(base_url="http://localhost:9999/v1", timeout_sec=5)
        client = build_client("sk-test", settings)

        assert isinstance(client, openai.OpenAI)
        assert client.max_retries == 0
        assert str(client.base_url).startswith("http://localhost:9999/v1")
