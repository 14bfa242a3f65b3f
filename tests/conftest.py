"""
Configurazione pytest e fixture comuni.
"""
import pytest

import core.config
from core.config import ProcessorConfig
from ingest.types import build_tabular


@pytest.fixture
def mock_config(monkeypatch):
    """Fixture configurazione senza credenziale remota (installata come singleton)."""
    config = ProcessorConfig(
        openai_api_key="",
        ocr_enabled=True,
        ocr_languages="eng",
        max_upload_mb=1,
        report_max_anomalies=10,
    )
    monkeypatch.setattr(core.config, "_config", config)
    yield config


@pytest.fixture
def remote_config(monkeypatch):
    """Fixture configurazione con credenziale remota."""
    config = ProcessorConfig(openai_api_key="sk-test", openai_model="gpt-4o-mini")
    monkeypatch.setattr(core.config, "_config", config)
    yield config


@pytest.fixture
def sample_csv_content():
    """Fixture per contenuto CSV di esempio."""
    return (
        b"Month,Sales,Region\n"
        b"Jan,100,North\n"
        b"Feb,100,South\n"
        b"Mar,100,North\n"
        b"Apr,200,South\n"
        b"May,200,North\n"
        b"Jun,200,South\n"
    )


@pytest.fixture
def sample_tabular():
    """Fixture per modello tabellare di esempio (trend crescente, nessuna anomalia)."""
    return build_tabular(
        ["Month", "Sales", "Region"],
        [
            ["Jan", "100", "North"],
            ["Feb", "100", "South"],
            ["Mar", "100", "North"],
            ["Apr", "200", "South"],
            ["May", "200", "North"],
            ["Jun", "200", "South"],
        ],
        "sales.csv",
        "text/csv",
    )


@pytest.fixture
def outlier_tabular():
    """Fixture con un outlier evidente nella colonna X."""
    return build_tabular(
        ["Id", "X"],
        [[f"r{i + 1}", value] for i, value in enumerate([10, 10, 10, 100, 10, 10])],
        "outlier.csv",
        "text/csv",
    )
