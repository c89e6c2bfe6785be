import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.database import Database, PostgresMeasurementStore
from app.routers import colors, measurements
from shared.errors import NotFoundError, StoreError, ValidationError
from shared.measurement_service import IngestionService, QueryService
from shared.measurement_store import InMemoryMeasurementStore, MeasurementStore
from shared.smoothing import WindowRegistry

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> MeasurementStore:
    if settings.store_backend == "memory":
        return InMemoryMeasurementStore()
    return PostgresMeasurementStore(Database(settings.database_url))


def create_app(settings: Optional[Settings] = None, store: Optional[MeasurementStore] = None) -> FastAPI:
    settings = settings or get_settings()
    if store is None:
        store = build_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await store.connect()
        logger.info("Measurement store ready (%s)", type(store).__name__)
        yield
        await store.close()

    app = FastAPI(title="RGB Sensor Backend", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.ingestion = IngestionService(store, settings.calibration)
    app.state.queries = QueryService(store)
    app.state.windows = WindowRegistry(settings.smoothing_window_size, settings.max_sessions)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Error responses are always {"message": ...}
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        logger.info("Rejected measurement: %s", exc)
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"message": "Invalid request"})

    @app.exception_handler(NotFoundError)
    async def not_found_error(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": "Measurement not found"})

    @app.exception_handler(StoreError)
    async def store_error(request: Request, exc: StoreError):
        logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"message": "Internal Server Error"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail}, headers=exc.headers)

    @app.get("/health")
    async def health():
        """Health check endpoint for Docker"""
        return {"status": "healthy"}

    # Include Routers
    app.include_router(measurements.router, prefix="/api", tags=["Measurements"])
    app.include_router(colors.router, prefix="/api", tags=["Colors"])

    return app


logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()
