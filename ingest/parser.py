"""
Parse dispatcher - bytes grezzi → TabularData.

Routing (gate) → parser della famiglia di formato. Gli errori di parsing sono
terminali e vengono propagati al chiamante così come sono.
"""
import logging
import time
from typing import Optional

from core.config import ProcessorConfig, get_config
from core.logger import log_json
from ingest.csv_parser import ByteSource, parse_delimited
from ingest.excel_parser import parse_excel
from ingest.gate import route_file
from ingest.text_extract import TextTableHeuristic, parse_document
from ingest.types import TabularData

logger = logging.getLogger(__name__)


def _as_bytes(source: ByteSource) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    read = getattr(source, 'read', None)
    if callable(read):
        return read()
    return b''.join(source)


def parse_file(
    file_content: ByteSource,
    file_name: str,
    content_type: Optional[str] = None,
    ext: Optional[str] = None,
    heuristic: Optional[TextTableHeuristic] = None,
    config: Optional[ProcessorConfig] = None
) -> TabularData:
    """
    Parse file nel modello tabellare normalizzato.

    Args:
        file_content: bytes, file-like binario o iterabile di chunk
            (i formati delimitati vengono consumati in modo incrementale)
        file_name: Nome file
        content_type: Content type dichiarato (opzionale)
        ext: Estensione file (se None, estrae da file_name)
        heuristic: Euristica tabellare per documenti (default whitespace)
        config: Configurazione (default get_config())

    Returns:
        TabularData

    Raises:
        UnsupportedFormat: Formato non riconosciuto
        EmptyInput: Nessun contenuto dopo la normalizzazione
        ParseError: File non leggibile
    """
    start_time = time.time()
    config = config or get_config()

    family, ext = route_file(file_name, content_type=content_type, ext=ext)

    if family == 'delimited':
        data = parse_delimited(file_content, file_name, ext=ext)
    elif family == 'spreadsheet':
        data = parse_excel(_as_bytes(file_content), file_name, ext=ext)
    else:
        # document / image
        data = parse_document(
            _as_bytes(file_content),
            file_name,
            ext=ext,
            heuristic=heuristic,
            ocr_enabled=config.ocr_enabled,
            ocr_languages=config.get_ocr_languages()
        )

    log_json(
        level='info',
        message=f"File parsed: {file_name}",
        stage='parse',
        file_name=file_name,
        ext=ext,
        family=family,
        rows_total=data.row_count,
        columns_total=data.column_count,
        elapsed_ms=(time.time() - start_time) * 1000
    )
    return data
