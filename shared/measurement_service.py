import logging
from contextlib import aclosing
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from shared.color_math import ALL_OUTPUTS, DEFAULT_CALIBRATION, Calibration, describe
from shared.measurement_store import MeasurementStore
from shared.models import ProcessedColor, RawMeasurement
from shared.smoothing import SmoothingWindow

logger = logging.getLogger(__name__)


class IngestionService:
    def __init__(self, store: MeasurementStore, calibration: Calibration = DEFAULT_CALIBRATION):
        self.store = store
        self.calibration = calibration

    async def ingest(self, triple: Sequence[Any]) -> RawMeasurement:
        """The only write path: validation and persistence happen in the store."""
        record = await self.store.append(triple)
        logger.info("Measurement %s ingested: rgb%s", record.id, record.triple)
        return record

    async def ingest_and_process(
        self,
        triple: Sequence[Any],
        window: SmoothingWindow,
        calibration: Optional[Calibration] = None,
        include: Iterable[str] = ALL_OUTPUTS,
    ) -> Tuple[RawMeasurement, ProcessedColor]:
        """
        Full live-display pipeline: Persist -> Smooth -> Calibrate -> Convert

        The stored triple (not the raw input) goes into the caller's window, so
        the descriptor can always be recomputed from history. The descriptor
        itself is not stored.
        """
        record = await self.ingest(triple)
        averaged = window.push(record.triple)
        color = describe(averaged, calibration or self.calibration, include)
        return record, color


class QueryService:
    def __init__(self, store: MeasurementStore):
        self.store = store

    async def latest(self) -> Optional[RawMeasurement]:
        """Most recent record, or None for an empty store. Live displays poll this."""
        async with aclosing(self.store.list_descending()) as records:
            async for record in records:
                return record
        return None

    async def history(self, limit: Optional[int] = None) -> List[RawMeasurement]:
        result = []
        if limit is not None and limit <= 0:
            return result
        async with aclosing(self.store.list_descending()) as records:
            async for record in records:
                result.append(record)
                if limit is not None and len(result) >= limit:
                    break
        return result

    async def one(self, measurement_id: int) -> RawMeasurement:
        return await self.store.get_by_id(measurement_id)
