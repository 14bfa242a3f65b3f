"""
Gate - Routing file per famiglia di formato.

Determina il parser da usare in base a content type dichiarato e/o estensione.
"""
import logging
from typing import Optional, Tuple

from core.exceptions import UnsupportedFormat

logger = logging.getLogger(__name__)

EXTENSION_FAMILIES = {
    'csv': 'delimited',
    'tsv': 'delimited',
    'xlsx': 'spreadsheet',
    'xls': 'spreadsheet',
    'pdf': 'document',
    'docx': 'document',
    'txt': 'document',
    'jpg': 'image',
    'jpeg': 'image',
    'png': 'image',
}

# (frammento content type, famiglia, estensione canonica)
CONTENT_TYPE_RULES = [
    ('tab-separated-values', 'delimited', 'tsv'),
    ('csv', 'delimited', 'csv'),
    ('spreadsheet', 'spreadsheet', 'xlsx'),
    ('ms-excel', 'spreadsheet', 'xls'),
    ('pdf', 'document', 'pdf'),
    ('wordprocessingml', 'document', 'docx'),
    ('text/plain', 'document', 'txt'),
    ('image/png', 'image', 'png'),
    ('image/jpeg', 'image', 'jpg'),
]

MIME_TYPES = {
    'csv': 'text/csv',
    'tsv': 'text/tab-separated-values',
    'xlsx': 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
    'xls': 'application/vnd.ms-excel',
    'pdf': 'application/pdf',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'txt': 'text/plain',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
}


def _extension_from_name(file_name: str) -> Optional[str]:
    if file_name and '.' in file_name:
        return file_name.rsplit('.', 1)[-1].lower().strip()
    return None


def route_file(
    file_name: str,
    content_type: Optional[str] = None,
    ext: Optional[str] = None
) -> Tuple[str, str]:
    """
    Route file verso la famiglia di parser.

    L'estensione (esplicita o estratta da file_name) ha precedenza; il content
    type si usa solo se l'estensione manca o non è riconosciuta (i browser
    dichiarano spesso i CSV come application/vnd.ms-excel).

    Args:
        file_name: Nome file
        content_type: Content type dichiarato (opzionale)
        ext: Estensione file (se None, estrae da file_name)

    Returns:
        Tuple (family, ext):
        - family: 'delimited', 'spreadsheet', 'document' o 'image'
        - ext: Estensione normalizzata (lowercase, senza punto)

    Raises:
        UnsupportedFormat: Se formato file non supportato
    """
    if ext is None:
        ext = _extension_from_name(file_name)
    if ext is not None:
        ext = ext.lower().strip().lstrip('.')

    if ext and ext in EXTENSION_FAMILIES:
        family = EXTENSION_FAMILIES[ext]
        logger.info(f"[GATE] File {file_name} routed to {family} (ext={ext})")
        return family, ext

    if content_type:
        ctype = content_type.lower()
        for fragment, family, canonical_ext in CONTENT_TYPE_RULES:
            if fragment in ctype:
                logger.info(f"[GATE] File {file_name} routed to {family} (content_type={content_type})")
                return family, canonical_ext

    error_msg = (
        f"Formato file non supportato: {file_name!r} (ext={ext}, content_type={content_type}). "
        f"Supportati: CSV, TSV, XLSX, XLS, PDF, DOCX, TXT, JPG, JPEG, PNG"
    )
    logger.error(f"[GATE] {error_msg}")
    raise UnsupportedFormat(error_msg)


def mime_type_for(ext: str) -> str:
    """Identificatore formato per metadata (MIME type)."""
    return MIME_TYPES.get(ext, 'application/octet-stream')
