from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

Cell = Union[str, int, float, bool, None]

Family = str  # "delimited" | "spreadsheet" | "document" | "image"


@dataclass(frozen=True)
class TabularMetadata:
    file_name: str
    file_type: str
    row_count: int
    column_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fileName": self.file_name,
            "fileType": self.file_type,
            "rowCount": self.row_count,
            "columnCount": self.column_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TabularMetadata":
        return cls(
            file_name=str(data.get("fileName") or data.get("file_name") or ""),
            file_type=str(data.get("fileType") or data.get("file_type") or ""),
            row_count=int(data.get("rowCount", data.get("row_count", 0)) or 0),
            column_count=int(data.get("columnCount", data.get("column_count", 0)) or 0),
        )


@dataclass(frozen=True)
class TabularData:
    """
    Modello tabellare normalizzato prodotto da tutti i parser.

    - columns: header in ordine (non necessariamente univoci o non vuoti)
    - rows: righe dati senza header; la lunghezza non è garantita uguale a columns
    - metadata: derivato, non autoritativo (ricalcolare i conteggi dal contenuto)
    """
    columns: List[str]
    rows: List[List[Cell]] = field(default_factory=list)
    metadata: Optional[TabularMetadata] = None

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "columns": list(self.columns),
            "rows": [list(row) for row in self.rows],
        }
        if self.metadata is not None:
            data["metadata"] = self.metadata.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TabularData":
        metadata = data.get("metadata")
        return cls(
            columns=[str(col) for col in data["columns"]],
            rows=[list(row) for row in data.get("rows") or []],
            metadata=TabularMetadata.from_dict(metadata) if metadata else None,
        )


def cell_at(row: Sequence[Cell], index: int) -> Cell:
    """Accesso difensivo a una cella (righe corte → None)."""
    if 0 <= index < len(row):
        return row[index]
    return None


def build_tabular(
    columns: List[str],
    rows: List[List[Cell]],
    file_name: str,
    file_type: str,
) -> TabularData:
    """Costruisce TabularData con metadata calcolati sui conteggi effettivi."""
    return TabularData(
        columns=columns,
        rows=rows,
        metadata=TabularMetadata(
            file_name=file_name,
            file_type=file_type,
            row_count=len(rows),
            column_count=len(columns),
        ),
    )
