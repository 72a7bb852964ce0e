"""HTTP API exposing per-view hourly load windows."""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, Field

from .config import settings
from .data_sources import build_data_source
from .domain import WindowSnapshot
from .errors import FetchFailed
from .window_manager import create_window, delete_window, get_window
from .window_store import WindowEntry
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="pws_hourly/api")

router = APIRouter()
DATA_SOURCE = build_data_source(settings)


class CreateWindowRequest(BaseModel):
    """Open a window for a station, optionally starting at a given date."""
    station_code: str = Field(min_length=1)
    date: Optional[dt.date] = None


class JumpRequest(BaseModel):
    """Date-picker value for an explicit jump."""
    date: dt.date


class VisibilityRequest(BaseModel):
    """Row key of the table row that just became visible."""
    row_key: str


class WindowResponse(WindowSnapshot):
    """Window snapshot tagged with its id."""
    window_id: str


class ExtendResponse(BaseModel):
    """Whether an extension ran, and the window afterwards."""
    extended: bool
    window: WindowResponse


def _respond(window_id: str, entry: WindowEntry) -> WindowResponse:
    return WindowResponse(window_id=window_id, **entry.controller.snapshot().model_dump())


def _require_window(window_id: str) -> WindowEntry:
    entry = get_window(window_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown window ID")
    return entry


@router.get("/stations", response_model=List[str])
async def list_stations():
    """Return the station codes the backend knows about."""
    try:
        return await DATA_SOURCE.fetch_stations()
    except FetchFailed as exc:
        logger.error(f"Failed to fetch stations: {exc}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch stations")


@router.post("/windows", response_model=WindowResponse)
async def open_window(req: CreateWindowRequest):
    """Create a window and load today (or `date`) with backfill."""
    window_id, entry = create_window(DATA_SOURCE)
    if req.date is None:
        await entry.controller.select_station(req.station_code)
    else:
        await entry.controller.jump_to_date(req.date.isoformat(), station=req.station_code)
    return _respond(window_id, entry)


@router.get("/windows/{window_id}", response_model=WindowResponse)
async def read_window(window_id: str):
    """Return the current snapshot of a window."""
    return _respond(window_id, _require_window(window_id))


@router.post("/windows/{window_id}/jump", response_model=WindowResponse)
async def jump_window(window_id: str, req: JumpRequest):
    """Replace the window's rows with the nearest data on or before `date`."""
    entry = _require_window(window_id)
    await entry.controller.jump_to_date(req.date.isoformat())
    return _respond(window_id, entry)


@router.post("/windows/{window_id}/extend", response_model=ExtendResponse)
async def extend_window(window_id: str):
    """Load one more day into the past (dropped if one is already loading)."""
    entry = _require_window(window_id)
    extended = await entry.controller.extend_backward()
    return ExtendResponse(extended=extended, window=_respond(window_id, entry))


@router.post("/windows/{window_id}/last-row-visible", response_model=ExtendResponse)
async def last_row_visible(window_id: str, req: VisibilityRequest):
    """Scroll sentinel: the client saw `row_key` come into view."""
    entry = _require_window(window_id)
    extended = await entry.adapter.handle_visibility(req.row_key)
    return ExtendResponse(extended=extended, window=_respond(window_id, entry))


@router.delete("/windows/{window_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_window(window_id: str):
    """Tear down a window."""
    _require_window(window_id)
    delete_window(window_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
