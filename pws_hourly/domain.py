"""Records, window state, and snapshot schemas for the hourly loader.

`HourlyRecord` mirrors the upstream JSON row: five fixed identity fields plus
`record_count`, and whatever measurement columns the station reports (these
vary per sensor setup, so they ride along as pydantic extras). `LoadWindow` is
the controller's owned mutable state; `WindowSnapshot` is the read-only view
handed to listeners and serialized by the API.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

# Keys that identify a row rather than measure something.
IDENTITY_FIELDS = ("station_code", "year", "day", "represented_date", "represented_hour")

MeasurementValue = Union[int, float, str, None]


class HourlyRecord(BaseModel):
    """One aggregated observation for a station at a given hour."""

    model_config = ConfigDict(extra="allow")

    station_code: str
    year: int
    day: int
    represented_date: dt.date
    represented_hour: int = Field(ge=0, le=23)
    record_count: int

    @property
    def measurements(self) -> Dict[str, MeasurementValue]:
        """Station-specific measurement columns, in received order."""
        return dict(self.model_extra or {})

    @property
    def hour_key(self) -> tuple[str, int]:
        return self.represented_date.isoformat(), self.represented_hour

    def to_wire(self) -> Dict[str, Any]:
        """Serialize back to the upstream JSON shape."""
        return self.model_dump(mode="json")


def check_batch_invariants(records: Sequence[HourlyRecord], station: str) -> None:
    """Raise ValueError if a single response mixes stations or repeats an hour."""
    seen: set[tuple[str, int]] = set()
    for record in records:
        if record.station_code != station:
            raise ValueError(
                f"record for station {record.station_code!r} in response for {station!r}"
            )
        key = record.hour_key
        if key in seen:
            raise ValueError(f"duplicate record for {key[0]} hour {key[1]}")
        seen.add(key)


def parse_hourly_payload(payload: Any, station: str) -> List[HourlyRecord]:
    """Validate an upstream JSON array into HourlyRecords, keeping its order."""
    if not isinstance(payload, list):
        raise ValueError(f"expected a JSON array, got {type(payload).__name__}")
    records = [HourlyRecord.model_validate(item) for item in payload]
    check_batch_invariants(records, station)
    return records


class WindowState(str, Enum):
    """Lifecycle state of a load window."""
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass
class LoadWindow:
    """Mutable state for one station's loaded days.

    `records` is ordered newest-loaded to oldest-loaded and is only ever
    replaced wholesale (select/jump) or appended to (extension).
    """
    window_id: int
    station_code: str
    earliest_loaded_date: Optional[str] = None
    current_date: Optional[str] = None
    records: List[HourlyRecord] = field(default_factory=list)
    attempted_dates: List[str] = field(default_factory=list)
    is_loading: bool = False
    can_extend: bool = True
    last_error: Optional[str] = None


class TableRow(BaseModel):
    """One rendered table row."""
    row_key: str
    date: str
    hour: int
    values: Dict[str, Any]


class WindowSnapshot(BaseModel):
    """Read-only view of a controller's window."""
    state: WindowState
    station_code: Optional[str] = None
    current_date: Optional[str] = None
    earliest_loaded_date: Optional[str] = None
    attempted_dates: List[str] = Field(default_factory=list)
    is_loading: bool = False
    can_extend: bool = False
    last_error: Optional[str] = None
    columns: List[str] = Field(default_factory=list)
    rows: List[TableRow] = Field(default_factory=list)
    record_count: int = 0

    @property
    def last_row_key(self) -> Optional[str]:
        return self.rows[-1].row_key if self.rows else None
