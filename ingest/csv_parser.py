"""
CSV Parser (testo delimitato).

Encoding detection, tokenizzazione campi con gestione virgolette,
consumo incrementale dell'input (buffer solo del testo residuo non consumato).
"""
import codecs
import logging
from typing import BinaryIO, Iterable, Iterator, List, Optional, Tuple, Union

import chardet

from core.exceptions import EmptyInput, ParseError
from ingest.gate import mime_type_for
from ingest.types import TabularData, build_tabular

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

# BOM più lungo gestito (utf-8: 3 byte) + margine
DETECTION_MIN_BYTES = 4

ByteSource = Union[bytes, bytearray, BinaryIO, Iterable[bytes]]

SEPARATORS = {
    'csv': ',',
    'tsv': '\t',
}


def _decodes(sample: bytes, encoding: str, final: bool) -> bool:
    try:
        codecs.getincrementaldecoder(encoding)().decode(sample, final=final)
        return True
    except (UnicodeDecodeError, LookupError):
        return False


def detect_encoding(file_content: bytes, final: bool = True) -> Tuple[str, float]:
    """
    Rileva encoding provando: utf-8-sig (BOM) → utf-8 → chardet → cp1252 → latin-1.

    Args:
        file_content: Contenuto file (bytes) o primo chunk
        final: False se file_content è solo l'inizio dello stream
            (un carattere multibyte troncato a fine chunk non è un errore)

    Returns:
        Tuple (encoding, confidence)
    """
    sample = bytes(file_content[:CHUNK_SIZE])
    if len(file_content) > CHUNK_SIZE:
        final = False

    if sample.startswith(codecs.BOM_UTF8):
        logger.debug("[CSV_PARSER] Encoding detection: utf-8-sig (BOM)")
        return 'utf-8-sig', 1.0

    if _decodes(sample, 'utf-8', final):
        logger.debug("[CSV_PARSER] Encoding detection: utf-8")
        return 'utf-8', 1.0

    encoding_result = chardet.detect(sample)
    detected = encoding_result.get('encoding')
    confidence = encoding_result.get('confidence') or 0.0
    if detected and _decodes(sample, detected, final):
        logger.debug(f"[CSV_PARSER] Encoding detection: {detected} (chardet confidence={confidence:.2f})")
        return detected.lower(), confidence

    for enc in ['cp1252', 'latin-1']:
        if _decodes(sample, enc, final):
            logger.debug(f"[CSV_PARSER] Encoding detection fallback: {enc}")
            return enc, 0.0

    # latin-1 decodifica qualsiasi byte: non raggiungibile in pratica
    logger.warning("[CSV_PARSER] Encoding detection failed, using utf-8 with errors='replace'")
    return 'utf-8', 0.0


def split_fields(line: str, separator: str = ',') -> List[str]:
    """
    Tokenizza una riga in campi.

    Scansione carattere per carattere: '"' alterna lo stato quoted (le virgolette
    non entrano nel campo), il separatore spezza solo fuori dalle virgolette.
    Ogni campo viene ripulito dagli spazi.
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == separator and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append(''.join(current).strip())
    return fields


def iter_chunks(source: ByteSource, chunk_size: int = CHUNK_SIZE) -> Iterator[bytes]:
    """Normalizza bytes / file-like / iterabile di bytes in una sequenza di chunk."""
    if isinstance(source, (bytes, bytearray)):
        for start in range(0, len(source), chunk_size):
            yield bytes(source[start:start + chunk_size])
        return

    read = getattr(source, 'read', None)
    if callable(read):
        while True:
            chunk = read(chunk_size)
            if not chunk:
                return
            yield chunk
        return

    for chunk in source:
        if chunk:
            yield bytes(chunk)


def _open_decoder(head: bytes, encoding: Optional[str], final: bool):
    if encoding is None:
        encoding, _ = detect_encoding(head, final=final)
    return codecs.getincrementaldecoder(encoding)(errors='replace')


def iter_lines(chunks: Iterable[bytes], encoding: Optional[str] = None) -> Iterator[str]:
    """
    Decodifica incrementale e split in righe.

    Mantiene in memoria solo il testo dopo l'ultimo newline non ancora consumato.
    Se encoding è None viene rilevato sui primi DETECTION_MIN_BYTES byte
    (chunk più corti vengono accumulati, il BOM non va spezzato).
    """
    decoder = None
    head = b''
    buffer = ''

    for chunk in chunks:
        if decoder is None:
            head += chunk
            if len(head) < DETECTION_MIN_BYTES:
                continue
            decoder = _open_decoder(head, encoding, final=False)
            chunk, head = head, b''

        buffer += decoder.decode(chunk)
        if '\n' not in buffer:
            continue

        *complete, buffer = buffer.split('\n')
        yield from complete

    if decoder is None and head:
        decoder = _open_decoder(head, encoding, final=True)
        buffer += decoder.decode(head)
    if decoder is not None:
        buffer += decoder.decode(b'', final=True)
    if buffer:
        yield buffer


def parse_delimited(
    source: ByteSource,
    file_name: str = "",
    separator: Optional[str] = None,
    encoding: Optional[str] = None,
    ext: str = 'csv'
) -> TabularData:
    """
    Parse testo delimitato in TabularData.

    Prima riga non vuota → columns, righe successive non vuote → rows.

    Args:
        source: bytes, file-like binario o iterabile di chunk bytes
        file_name: Nome file (metadata)
        separator: Separatore (se None: ',' per csv, '\\t' per tsv)
        encoding: Encoding (se None, auto-rileva sul primo chunk)
        ext: Estensione ('csv' o 'tsv')

    Returns:
        TabularData

    Raises:
        EmptyInput: Nessuna riga non vuota
        ParseError: Encoding dichiarato sconosciuto
    """
    if separator is None:
        separator = SEPARATORS.get(ext, ',')

    if encoding is not None:
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise ParseError(f"Encoding non supportato: {encoding}") from e

    columns: Optional[List[str]] = None
    rows: List[List[str]] = []

    for line in iter_lines(iter_chunks(source), encoding):
        if not line.strip():
            continue
        fields = split_fields(line, separator)
        if columns is None:
            columns = fields
        else:
            rows.append(fields)

    if columns is None:
        logger.warning(f"[CSV_PARSER] Empty delimited input: {file_name}")
        raise EmptyInput(f"File CSV vuoto: {file_name or 'input'}")

    logger.info(
        f"[CSV_PARSER] Delimited text parsed: {len(rows)} rows, {len(columns)} columns, "
        f"separator={separator!r}"
    )
    return build_tabular(columns, rows, file_name, mime_type_for(ext))
