"""
Estrattore testo per documenti poco strutturati (PDF, DOCX, TXT, immagini).

Estrae testo grezzo, lo divide in righe non vuote e applica un'euristica
per ricostruire una tabella. L'euristica è volutamente lossy (best-effort):
non è un recupero esatto delle tabelle, ed è isolata dietro TextTableHeuristic
per poter sostituire un estrattore più rigoroso senza toccare la pipeline.
"""
import io
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import docx
from pypdf import PdfReader

from core.exceptions import EmptyInput, ParseError
from ingest.csv_parser import detect_encoding
from ingest.gate import mime_type_for
from ingest.ocr_extract import extract_text_from_image, extract_text_from_pdf
from ingest.types import Cell, TabularData, build_tabular

logger = logging.getLogger(__name__)

# Run di 2+ spazi bianchi oppure tab
COLUMN_GAP = re.compile(r'\s{2,}|\t')

SINGLE_COLUMN = 'Content'


class TextTableHeuristic(ABC):
    """Capability: trasforma righe di testo non vuote in (columns, rows)."""

    @abstractmethod
    def to_table(self, lines: List[str]) -> Tuple[List[str], List[List[Cell]]]:
        ...


class WhitespaceTableHeuristic(TextTableHeuristic):
    """
    Euristica di default.

    Divide la prima riga su run di 2+ spazi o tab: se produce più di un token
    non vuoto il documento è tabellare (ogni riga successiva divisa allo stesso
    modo e troncata/riempita al numero di colonne), altrimenti modello a colonna
    singola "Content" con una riga per ogni riga di testo.
    """

    def split(self, line: str) -> List[str]:
        return [token.strip() for token in COLUMN_GAP.split(line.strip())]

    def to_table(self, lines: List[str]) -> Tuple[List[str], List[List[Cell]]]:
        header = [token for token in self.split(lines[0]) if token]

        if len(header) > 1:
            width = len(header)
            rows: List[List[Cell]] = []
            for line in lines[1:]:
                cells = self.split(line)[:width]
                cells.extend([''] * (width - len(cells)))
                rows.append(cells)
            return header, rows

        return [SINGLE_COLUMN], [[line] for line in lines]


def non_blank_lines(text: str) -> List[str]:
    return [line for line in text.splitlines() if line.strip()]


def extract_pdf_text(
    file_content: bytes,
    ocr_enabled: bool = True,
    ocr_languages: str = 'eng'
) -> str:
    """
    Estrae il layer di testo del PDF con pypdf.

    Se il PDF non ha testo (scansione) e l'OCR è abilitato, rasterizza le pagine
    e usa tesseract.
    """
    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = [(page.extract_text() or '') for page in reader.pages]
    except Exception as e:
        logger.error(f"[TEXT_EXTRACT] Error reading PDF: {e}")
        raise ParseError(f"Errore lettura PDF: {str(e)}") from e

    text = '\n'.join(pages)
    logger.debug(f"[TEXT_EXTRACT] PDF text layer: {len(pages)} pages, {len(text)} characters")

    if text.strip() or not ocr_enabled:
        return text

    logger.info("[TEXT_EXTRACT] PDF without text layer, falling back to OCR")
    try:
        return extract_text_from_pdf(file_content, languages=ocr_languages)
    except Exception as e:
        raise ParseError(f"Errore OCR PDF: {str(e)}") from e


def extract_docx_text(file_content: bytes) -> str:
    """Testo dei paragrafi seguito dalle righe delle tabelle (celle separate da tab)."""
    try:
        document = docx.Document(io.BytesIO(file_content))
    except Exception as e:
        logger.error(f"[TEXT_EXTRACT] Error reading DOCX: {e}")
        raise ParseError(f"Errore lettura DOCX: {str(e)}") from e

    lines = [paragraph.text for paragraph in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            lines.append('\t'.join(cell.text.strip() for cell in row.cells))
    return '\n'.join(lines)


def decode_text(file_content: bytes) -> str:
    encoding, _ = detect_encoding(file_content)
    return file_content.decode(encoding, errors='replace')


def extract_raw_text(
    file_content: bytes,
    ext: str,
    ocr_enabled: bool = True,
    ocr_languages: str = 'eng'
) -> str:
    """Estrae testo grezzo in base all'estensione."""
    if ext == 'pdf':
        return extract_pdf_text(file_content, ocr_enabled, ocr_languages)
    if ext == 'docx':
        return extract_docx_text(file_content)
    if ext in ('jpg', 'jpeg', 'png'):
        if not ocr_enabled:
            raise ParseError("OCR disabilitato: impossibile estrarre testo da immagini")
        try:
            return extract_text_from_image(file_content, languages=ocr_languages)
        except Exception as e:
            raise ParseError(f"Errore OCR immagine: {str(e)}") from e
    return decode_text(file_content)


def parse_document(
    file_content: bytes,
    file_name: str = "",
    ext: str = 'txt',
    heuristic: Optional[TextTableHeuristic] = None,
    ocr_enabled: bool = True,
    ocr_languages: str = 'eng'
) -> TabularData:
    """
    Parse documento poco strutturato in TabularData.

    Args:
        file_content: Contenuto file (bytes)
        file_name: Nome file (metadata)
        ext: 'pdf', 'docx', 'txt', 'jpg', 'jpeg', 'png'
        heuristic: Euristica tabellare (default WhitespaceTableHeuristic)
        ocr_enabled: Abilita OCR per immagini/PDF scansionati
        ocr_languages: Lingue tesseract

    Raises:
        EmptyInput: Nessuna riga di testo non vuota
        ParseError: Sorgente non leggibile
    """
    text = extract_raw_text(file_content, ext, ocr_enabled, ocr_languages)
    lines = non_blank_lines(text)

    if not lines:
        logger.warning(f"[TEXT_EXTRACT] No text extracted from {file_name}")
        raise EmptyInput(f"Documento vuoto o illeggibile: {file_name or 'input'}")

    heuristic = heuristic or WhitespaceTableHeuristic()
    columns, rows = heuristic.to_table(lines)

    logger.info(
        f"[TEXT_EXTRACT] Document parsed ({type(heuristic).__name__}): "
        f"{len(rows)} rows, {len(columns)} columns"
    )
    return build_tabular(columns, rows, file_name, mime_type_for(ext))
