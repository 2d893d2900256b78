from __future__ import annotations

import json
from typing import Any, Dict, List

import pandas as pd


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


def graph_records_frame(records: List[Dict[str, Any]]) -> pd.DataFrame:
    """
    Tabular view of nodes or edges.

    Columns are the sorted union of keys across all records; nested
    values are JSON-encoded and missing values are left blank.
    """
    columns = sorted({key for record in records for key in record})
    rows = [{col: _cell(record.get(col)) for col in columns} for record in records]
    return pd.DataFrame(rows, columns=columns)


def graph_to_csv(records: List[Dict[str, Any]]) -> str:
    return graph_records_frame(records).to_csv(index=False)


def export_filename(kind: str, diagram_type: str, date: str) -> str:
    return f"synapse-{kind}-{diagram_type}-{date}.csv"
