"""
Configurazione per insight-processor usando pydantic-settings.

Gestisce tutte le variabili d'ambiente e feature flags per la pipeline.
"""
import logging
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Carica .env
load_dotenv()

logger = logging.getLogger(__name__)


class ProcessorConfig(BaseSettings):
    """Configurazione completa del processor."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Server
    port: int = Field(default=8001, description="Porta server FastAPI")
    max_upload_mb: int = Field(default=20, ge=1, le=500, description="Dimensione massima upload (MB)")

    # OpenAI (insight remoti)
    openai_api_key: str = Field(default="", description="API key OpenAI (vuota = solo insight statistici)")
    openai_model: str = Field(default="gpt-4o-mini", description="Modello per insight remoti")
    openai_temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Temperature chiamata insight")
    openai_max_tokens: int = Field(default=1000, ge=1, le=16000, description="Max token risposta insight")
    openai_base_url: Optional[str] = Field(default=None, description="Endpoint chat-completion alternativo")
    openai_timeout_sec: float = Field(default=60.0, gt=0, description="Timeout chiamata remota (secondi)")

    # Insight / report
    insights_sample_rows: int = Field(default=10, ge=0, le=100, description="Righe campione nel prompt")
    report_max_anomalies: int = Field(default=10, ge=1, le=100, description="Max anomalie nel report")

    # OCR
    ocr_enabled: bool = Field(default=True, description="Abilita OCR per immagini e PDF scansionati")
    ocr_languages: str = Field(default="eng", description="Lingue tesseract (es. 'eng+ita')")

    # Processor info
    processor_name: str = Field(default="insight-processor", description="Nome processor")
    processor_version: str = Field(default="1.0.0", description="Versione processor")

    def get_ocr_languages(self) -> str:
        """Ritorna lingue OCR normalizzate per pytesseract."""
        langs: List[str] = [lang.strip() for lang in self.ocr_languages.replace(",", "+").split("+")]
        return "+".join(lang for lang in langs if lang) or "eng"

    def has_openai_credential(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())

    def validate_config(self) -> bool:
        """Valida configurazione critica."""
        if not self.has_openai_credential():
            # Warning, non errore (insight remoti disabilitati)
            logger.warning("OPENAI_API_KEY non configurato - insight remoti disabilitati, uso engine statistico")

        logger.info("✅ Configurazione processor validata con successo")
        return True


# Istanza globale configurazione
_config: Optional[ProcessorConfig] = None


def get_config() -> ProcessorConfig:
    """Ottiene istanza configurazione (singleton)."""
    global _config
    if _config is None:
        _config = ProcessorConfig()
        _config.validate_config()
    return _config


def reset_config() -> None:
    """Invalida il singleton (usato dai test dopo aver cambiato l'ambiente)."""
    global _config
    _config = None


def validate_config() -> bool:
    """Valida configurazione critica (funzione standalone)."""
    return get_config().validate_config()
