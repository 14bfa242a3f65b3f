"""
Statistiche di base su colonne numeriche (numpy).
"""
import math
from typing import Any, List, Optional

import numpy as np

from ingest.types import TabularData, cell_at
from insights.models import ColumnStats, NumericColumn


def to_number(value: Any) -> Optional[float]:
    """
    Converte una cella in float finito.

    Celle vuote, booleani, testo non numerico, NaN e infiniti → None
    (vengono saltate, non trattate come zero).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        # float() accetta "1_000", i numeri nei file no
        if not text or '_' in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None

    return number if math.isfinite(number) else None


def detect_numeric_columns(data: TabularData) -> List[NumericColumn]:
    """Colonne con almeno un valore numerico, in ordine di colonna."""
    numeric_columns: List[NumericColumn] = []

    for col_index, name in enumerate(data.columns):
        values = []
        row_indices = []
        for row_index, row in enumerate(data.rows):
            number = to_number(cell_at(row, col_index))
            if number is not None:
                values.append(number)
                row_indices.append(row_index)

        if values:
            numeric_columns.append(NumericColumn(
                name=name, index=col_index, values=values, row_indices=row_indices
            ))

    return numeric_columns


def column_stats(values: List[float]) -> ColumnStats:
    """
    Media, mediana, deviazione standard di popolazione, min, max.

    values non deve essere vuoto (garantito da detect_numeric_columns).
    """
    arr = np.asarray(values, dtype=float)
    return ColumnStats(
        mean=float(arr.mean()),
        median=float(np.median(arr)),
        std=float(arr.std()),
        min=float(arr.min()),
        max=float(arr.max()),
        count=int(arr.size),
    )
