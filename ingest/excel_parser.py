"""
Excel Parser.

Legge il primo sheet del workbook come griglia (header in prima riga) con pandas.
"""
import io
import logging
import math
from typing import Any, List

import pandas as pd

from core.exceptions import EmptyInput, ParseError
from ingest.gate import mime_type_for
from ingest.types import Cell, TabularData, build_tabular

logger = logging.getLogger(__name__)


def _clean_cell(value: Any) -> Cell:
    """Converte valori pandas/numpy in primitivi Python ('' per celle vuote)."""
    if value is None:
        return ''
    if isinstance(value, float):
        # include numpy.float64
        return '' if math.isnan(value) else float(value)
    if isinstance(value, (str, bool, int)):
        return value
    if pd.isna(value):
        return ''
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    if hasattr(value, 'item'):
        # scalare numpy
        return value.item()
    return str(value)


def _header_name(value: Cell) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return '' if value is None else str(value).strip()


def parse_excel(file_content: bytes, file_name: str = "", ext: str = 'xlsx') -> TabularData:
    """
    Parse file Excel con pandas (primo sheet).

    Args:
        file_content: Contenuto file (bytes)
        file_name: Nome file (metadata)
        ext: 'xlsx' o 'xls'

    Returns:
        TabularData con header = prima riga non vuota

    Raises:
        EmptyInput: Sheet senza righe
        ParseError: Workbook non leggibile
    """
    try:
        df = pd.read_excel(
            io.BytesIO(file_content),
            sheet_name=0,
            header=None,
            dtype=object
        )
    except Exception as e:
        logger.error(f"[EXCEL_PARSER] Error reading workbook {file_name}: {e}")
        raise ParseError(f"Errore parsing Excel: {str(e)}") from e

    # Righe completamente vuote non fanno parte della griglia
    df = df.dropna(how='all')

    grid: List[List[Cell]] = [
        [_clean_cell(value) for value in record]
        for record in df.itertuples(index=False, name=None)
    ]

    if not grid:
        logger.warning(f"[EXCEL_PARSER] Empty first sheet: {file_name}")
        raise EmptyInput(f"File Excel vuoto: {file_name or 'input'}")

    columns = [_header_name(value) for value in grid[0]]
    rows = grid[1:]

    logger.info(f"[EXCEL_PARSER] Excel parsed: {len(rows)} rows, {len(columns)} columns")
    return build_tabular(columns, rows, file_name, mime_type_for(ext))
