"""Turn the ordered record sequence into table columns and rows."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

from pws_hourly.domain import IDENTITY_FIELDS, HourlyRecord, TableRow


@dataclass
class TableView:
    columns: List[str]
    rows: List[TableRow]


def row_key(record: HourlyRecord, index: int) -> str:
    """Stable key for the row at `index`; index keeps repeated hours distinct."""
    return f"{record.represented_date.isoformat()}-{record.represented_hour}-{index}"


def table_columns(records: Sequence[HourlyRecord]) -> List[str]:
    """Non-identity keys across all records, in first-seen order."""
    columns: dict[str, None] = {}
    for record in records:
        for key in record.to_wire():
            if key not in IDENTITY_FIELDS:
                columns.setdefault(key, None)
    return list(columns)


def build_table(records: Sequence[HourlyRecord]) -> TableView:
    columns = table_columns(records)
    rows = []
    for index, record in enumerate(records):
        wire = record.to_wire()
        rows.append(
            TableRow(
                row_key=row_key(record, index),
                date=wire["represented_date"],
                hour=record.represented_hour,
                values={column: wire.get(column) for column in columns},
            )
        )
    return TableView(columns=columns, rows=rows)
