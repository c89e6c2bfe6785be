from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.dependencies import get_ingestion, get_queries
from shared.color_math import describe
from shared.errors import ValidationError
from shared.measurement_service import IngestionService, QueryService
from shared.models import MeasurementCreate, ProcessedColor, RawMeasurement

router = APIRouter()


@router.get("/measurements", response_model=List[RawMeasurement])
async def get_measurements(
    limit: Optional[int] = Query(default=None, ge=1),
    queries: QueryService = Depends(get_queries),
):
    """All measurements, most recent first. Display clients poll this."""
    return await queries.history(limit)


@router.get("/measurements/{measurement_id}", response_model=RawMeasurement)
async def get_measurement(measurement_id: int, queries: QueryService = Depends(get_queries)):
    return await queries.one(measurement_id)


@router.get("/measurements/{measurement_id}/color", response_model=ProcessedColor)
async def get_measurement_color(
    measurement_id: int,
    ingestion: IngestionService = Depends(get_ingestion),
    queries: QueryService = Depends(get_queries),
):
    """
    Color description of a single stored reading, without smoothing.

    - **measurement_id**: id returned by POST /api/measurements
    """
    record = await queries.one(measurement_id)
    return describe(record.triple, ingestion.calibration)


@router.post("/measurements", status_code=201, response_model=RawMeasurement)
async def create_measurement(
    data: MeasurementCreate,
    ingestion: IngestionService = Depends(get_ingestion),
):
    """
    Stores one raw reading from the sensor.

    Request Body:
        - red, green, blue: integers in 0-255, all required and non-zero
    """
    # 0 counts as missing, same as null
    if not data.red or not data.green or not data.blue:
        raise ValidationError("All color values are required")
    return await ingestion.ingest(data.as_triple())
