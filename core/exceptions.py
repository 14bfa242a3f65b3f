"""
Tassonomia errori per insight-processor.

- ParseError e sottoclassi: errori terminali di ingestione, propagati al chiamante.
- InsightError e sottoclassi: errori della generazione insight remota,
  assorbiti dalla degradation chain (fallback su engine statistico).
"""
from typing import Optional


class ProcessorError(Exception):
    """Errore base del processor."""


class ParseError(ProcessorError, ValueError):
    """File non interpretabile come modello tabellare."""


class EmptyInput(ParseError):
    """Nessun contenuto dopo la normalizzazione (l'utente deve ricaricare il file)."""


class UnsupportedFormat(ParseError):
    """Formato non riconosciuto da nessun parser."""


class InsightError(ProcessorError):
    """Errore base generazione insight."""


class RemoteError(InsightError):
    """
    Errore di trasporto o API chiamando il servizio insight remoto.

    Attributes:
        status: Status HTTP (None se errore di rete/timeout)
        body: Corpo risposta o messaggio errore
    """

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body or ""


class InvalidInsightsShape(InsightError):
    """Risposta remota non conforme al contratto JSON degli insight."""

    def __init__(self, reason: str):
        super().__init__(f"Struttura insight non valida: {reason}")
        self.reason = reason


class InsightsUnavailable(InsightError):
    """Nessun input disponibile per il fallback statistico (errore terminale)."""
