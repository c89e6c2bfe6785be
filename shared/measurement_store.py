import asyncio
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, AsyncIterator, List, Optional, Sequence

from shared.errors import NotFoundError, ValidationError
from shared.models import RawMeasurement, RGB

logger = logging.getLogger(__name__)

CHANNELS = ("red", "green", "blue")


def validate_triple(triple: Sequence[Any]) -> RGB:
    """
    Checks a raw reading before it is stored.

    Raises:
        ValidationError: a channel is missing, is not an integer or is outside [0, 255].
    """
    if triple is None or len(triple) != 3:
        raise ValidationError("A measurement needs exactly red, green and blue values")

    for name, value in zip(CHANNELS, triple):
        if value is None:
            raise ValidationError(f"Missing {name} value")
        # bool is an int subclass but never a reading
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{name} must be an integer")
        if value < 0 or value > 255:
            raise ValidationError(f"{name} must be between 0 and 255")

    return (int(triple[0]), int(triple[1]), int(triple[2]))


class MeasurementStore(ABC):
    """
    Append-only, ordered log of raw measurements.

    The store alone assigns `id` (strictly increasing, never reused) and
    `created_at`. Records are never updated or deleted.
    """

    async def connect(self) -> None:
        pass

    async def close(self) -> None:
        pass

    @abstractmethod
    async def append(self, triple: Sequence[Any]) -> RawMeasurement:
        """Validates, assigns id and timestamp, persists, returns the full record."""

    @abstractmethod
    def list_descending(self) -> AsyncIterator[RawMeasurement]:
        """
        All records, newest first: (created_at, id) descending.

        Every call starts a fresh snapshot; nothing is remembered between calls.
        """

    @abstractmethod
    async def get_by_id(self, measurement_id: int) -> RawMeasurement:
        """Raises NotFoundError when no record has this id."""


class InMemoryMeasurementStore(MeasurementStore):
    """Process-local store. Ids restart on a new process, so use it for development and tests."""

    def __init__(self) -> None:
        self._records: List[RawMeasurement] = []
        self._by_id = {}
        self._last_id = 0
        self._lock = asyncio.Lock()

    async def append(self, triple: Sequence[Any]) -> RawMeasurement:
        red, green, blue = validate_triple(triple)

        async with self._lock:
            # No await between issuing the id and publishing the record
            created_at = datetime.now(timezone.utc)
            if self._records and created_at < self._records[-1].created_at:
                created_at = self._records[-1].created_at
            self._last_id += 1
            record = RawMeasurement(
                id=self._last_id, red=red, green=green, blue=blue, created_at=created_at
            )
            self._records.append(record)
            self._by_id[record.id] = record

        logger.debug("Stored measurement %s: %s", record.id, record.triple)
        return record

    async def list_descending(self) -> AsyncIterator[RawMeasurement]:
        snapshot = sorted(self._records, key=lambda m: (m.created_at, m.id), reverse=True)
        for record in snapshot:
            yield record

    async def get_by_id(self, measurement_id: int) -> RawMeasurement:
        record: Optional[RawMeasurement] = self._by_id.get(measurement_id)
        if record is None:
            raise NotFoundError(measurement_id)
        return record
