import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

import asyncpg

from shared.errors import NotFoundError, StoreError
from shared.measurement_store import MeasurementStore, validate_triple
from shared.models import RawMeasurement

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS measurement_counter (
        name TEXT PRIMARY KEY,
        value BIGINT NOT NULL
    );
    INSERT INTO measurement_counter (name, value)
    VALUES ('measurements', 0)
    ON CONFLICT (name) DO NOTHING;
    CREATE TABLE IF NOT EXISTS measurements (
        id BIGINT PRIMARY KEY,
        red SMALLINT NOT NULL CHECK (red BETWEEN 0 AND 255),
        green SMALLINT NOT NULL CHECK (green BETWEEN 0 AND 255),
        blue SMALLINT NOT NULL CHECK (blue BETWEEN 0 AND 255),
        created_at TIMESTAMPTZ NOT NULL
    );
    CREATE INDEX IF NOT EXISTS measurements_created_at_id_idx
        ON measurements (created_at DESC, id DESC);
"""

DRIVER_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)

# measurements.id is BIGINT
BIGINT_MIN = -(2 ** 63)
BIGINT_MAX = 2 ** 63 - 1


class Database:
    def __init__(self, dsn: str):
        self.dsn = dsn
        self.pool = None

    async def connect(self):
        if not self.pool:
            try:
                self.pool = await asyncpg.create_pool(self.dsn)
                logger.info("Connected to database")
            except DRIVER_ERRORS:
                logger.exception("Database connection failed")

    async def disconnect(self):
        if self.pool:
            await self.pool.close()
            self.pool = None
            logger.info("Disconnected from database")

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Pool connection with driver failures surfaced as StoreError."""
        if not self.pool:
            raise StoreError("Database not ready")
        try:
            async with self.pool.acquire() as connection:
                yield connection
        except DRIVER_ERRORS as e:
            logger.exception("Database operation failed")
            raise StoreError("Database operation failed") from e


def _to_measurement(row) -> RawMeasurement:
    return RawMeasurement(
        id=row["id"],
        red=row["red"],
        green=row["green"],
        blue=row["blue"],
        created_at=row["created_at"],
    )


class PostgresMeasurementStore(MeasurementStore):
    """
    Measurement log in PostgreSQL.

    Ids come from a counter row bumped inside the insert transaction. The row
    lock serializes concurrent appends, and a rolled back append gives its id
    back, so ids have no gaps. created_at is read under the same lock.
    """

    def __init__(self, db: Database):
        self.db = db

    async def connect(self) -> None:
        await self.db.connect()
        if self.db.pool:
            async with self.db.acquire() as conn:
                await conn.execute(SCHEMA)

    async def close(self) -> None:
        await self.db.disconnect()

    async def append(self, triple: Sequence[Any]) -> RawMeasurement:
        red, green, blue = validate_triple(triple)

        async with self.db.acquire() as conn:
            async with conn.transaction():
                next_id = await conn.fetchval(
                    """
                    UPDATE measurement_counter SET value = value + 1
                    WHERE name = 'measurements'
                    RETURNING value
                    """
                )
                row = await conn.fetchrow(
                    """
                    INSERT INTO measurements (id, red, green, blue, created_at)
                    VALUES ($1, $2, $3, $4, clock_timestamp())
                    RETURNING id, red, green, blue, created_at
                    """,
                    next_id, red, green, blue,
                )
        return _to_measurement(row)

    async def list_descending(self) -> AsyncIterator[RawMeasurement]:
        query = """
            SELECT id, red, green, blue, created_at
            FROM measurements
            ORDER BY created_at DESC, id DESC
        """
        async with self.db.acquire() as conn:
            # Server-side cursors only live inside a transaction
            async with conn.transaction(readonly=True):
                async for row in conn.cursor(query):
                    yield _to_measurement(row)

    async def get_by_id(self, measurement_id: int) -> RawMeasurement:
        if not BIGINT_MIN <= measurement_id <= BIGINT_MAX:
            raise NotFoundError(measurement_id)
        async with self.db.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT id, red, green, blue, created_at FROM measurements WHERE id = $1",
                measurement_id,
            )
        if not row:
            raise NotFoundError(measurement_id)
        return _to_measurement(row)
