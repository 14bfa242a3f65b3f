"""
Mock utilities per test.
Mock per client OpenAI (chat completions) e OCR.
"""
import json
from typing import Any, Dict, Optional
from unittest.mock import MagicMock, Mock

import httpx
import openai


DEFAULT_INSIGHTS = {
    "summary": "Sales doubled in the second quarter.",
    "trends": ["Sales increased steadily from April."],
    "anomalies": [],
    "recommendations": ["Keep tracking monthly sales.", "Compare regions."],
}


# ============================================================================
# OpenAI Mocks
# ============================================================================

def _completion(content: Optional[str]) -> MagicMock:
    return MagicMock(choices=[MagicMock(message=MagicMock(content=content))])


def _status_error(error_cls, status_code: int, message: str, body: Dict[str, Any]):
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    response = httpx.Response(status_code, request=request, json=body)
    return error_cls(message, response=response, body=body)


class MockOpenAIClient:
    """Mock client OpenAI completo per test."""

    def __init__(self):
        self.chat = Mock()
        self.chat.completions = Mock()
        self._response_mode = "success"

    def set_response_mode(self, mode: str, data: Optional[Any] = None):
        """
        Imposta modalità risposta mock.

        Modes:
        - "success": JSON insight corretto
        - "fenced": JSON corretto dentro ```json ... ```
        - "malformed": testo non JSON
        - "empty": contenuto vuoto
        - "invalid_shape": JSON valido ma contratto violato
        - "error": errore generico del client
        - "server_error": HTTP 500
        - "rate_limit": HTTP 429 (quota)
        """
        self._response_mode = mode
        create = self.chat.completions

        if mode == "success":
            create.create = Mock(return_value=_completion(json.dumps(data or DEFAULT_INSIGHTS)))
        elif mode == "fenced":
            fenced = "```json\n" + json.dumps(data or DEFAULT_INSIGHTS) + "\n```"
            create.create = Mock(return_value=_completion(fenced))
        elif mode == "malformed":
            create.create = Mock(return_value=_completion("This is not valid JSON {"))
        elif mode == "empty":
            create.create = Mock(return_value=_completion(""))
        elif mode == "invalid_shape":
            payload = data or {"summary": "ok", "trends": "not a list", "anomalies": [], "recommendations": []}
            create.create = Mock(return_value=_completion(json.dumps(payload)))
        elif mode == "error":
            create.create = Mock(side_effect=Exception("OpenAI API Error"))
        elif mode == "server_error":
            create.create = Mock(side_effect=_status_error(
                openai.InternalServerError, 500, "Internal error", {"error": {"message": "boom"}}
            ))
        elif mode == "rate_limit":
            create.create = Mock(side_effect=_status_error(
                openai.RateLimitError, 429, "Rate limit exceeded",
                {"error": {"code": "insufficient_quota", "message": "You exceeded your current quota"}}
            ))
        else:
            raise ValueError(f"Unknown response mode: {mode}")

    @property
    def create_mock(self) -> Mock:
        return self.chat.completions.create


def create_mock_openai_client(response_mode: str = "success", response_data: Optional[Any] = None):
    """
    Crea mock client OpenAI per test.

    Args:
        response_mode: vedi MockOpenAIClient.set_response_mode
        response_data: Payload da ritornare (success/fenced/invalid_shape)
    """
    mock_client = MockOpenAIClient()
    mock_client.set_response_mode(response_mode, response_data)
    return mock_client


# ============================================================================
# OCR Mocks
# ============================================================================

class MockOCR:
    """Mock per pytesseract e pdf2image."""

    def __init__(self):
        self._text_mode = "success"  # success, error, empty
        self._text_data = "Product  Qty  Price\nApples  10  1.50"
        self._pdf_pages = 1

    def set_text_mode(self, mode: str, text: Optional[str] = None, pages: int = 1):
        self._text_mode = mode
        if text:
            self._text_data = text
        self._pdf_pages = pages

    def image_to_string(self, image, **kwargs):
        """Mock pytesseract.image_to_string."""
        if self._text_mode == "success":
            return self._text_data
        if self._text_mode == "error":
            raise RuntimeError("OCR Error: Tesseract not found")
        return ""

    def convert_from_bytes(self, pdf_content, **kwargs):
        """Mock pdf2image.convert_from_bytes."""
        if self._text_mode == "error":
            raise RuntimeError("PDF conversion error")
        images = []
        for _ in range(self._pdf_pages):
            img = MagicMock()
            img.mode = "RGB"
            images.append(img)
        return images


def create_mock_ocr(text_mode: str = "success", text: Optional[str] = None, pages: int = 1):
    """Crea mock OCR per test."""
    mock_ocr = MockOCR()
    mock_ocr.set_text_mode(text_mode, text, pages)
    return mock_ocr
