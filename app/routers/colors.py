"""
Live Color Router

Smoothed color descriptors for live displays. Each display session owns its
own smoothing window, selected with the `session` query parameter.
"""
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from app.dependencies import get_ingestion, get_queries, get_windows
from shared.color_math import ALL_OUTPUTS, describe
from shared.measurement_service import IngestionService, QueryService
from shared.models import LiveColorResponse, MeasurementCreate, ProcessedColor
from shared.smoothing import WindowRegistry

router = APIRouter()

Output = Literal["hsl", "lab", "name"]


def _outputs(include: Optional[List[Output]]):
    return set(include) if include else ALL_OUTPUTS


@router.post("/colors", status_code=201, response_model=LiveColorResponse)
async def ingest_color(
    data: MeasurementCreate,
    session: str = Query(default="default", min_length=1, max_length=64),
    include: Optional[List[Output]] = Query(default=None),
    ingestion: IngestionService = Depends(get_ingestion),
    windows: WindowRegistry = Depends(get_windows),
):
    """
    Stores a reading and returns its smoothed color description.

    - **session**: display session whose smoothing window is used
    - **include**: any of hsl, lab, name (all by default)
    """
    record, color = await ingestion.ingest_and_process(
        data.as_triple(), windows.get(session), include=_outputs(include)
    )
    return {"measurement": record, "color": color}


@router.get("/colors/latest", response_model=ProcessedColor)
async def latest_color(
    session: str = Query(default="default", min_length=1, max_length=64),
    include: Optional[List[Output]] = Query(default=None),
    queries: QueryService = Depends(get_queries),
    ingestion: IngestionService = Depends(get_ingestion),
    windows: WindowRegistry = Depends(get_windows),
):
    """Latest stored reading pushed through the session window. Meant to be polled."""
    record = await queries.latest()
    if record is None:
        raise HTTPException(status_code=404, detail="No measurements yet")

    averaged = windows.get(session).push(record.triple)
    return describe(averaged, ingestion.calibration, _outputs(include))


@router.delete("/colors/sessions/{session}", status_code=204)
async def drop_session(session: str, windows: WindowRegistry = Depends(get_windows)):
    """Forgets the session and its smoothing window."""
    windows.discard(session)
    return Response(status_code=204)
