from fastapi import Request

from shared.measurement_service import IngestionService, QueryService
from shared.smoothing import WindowRegistry


def get_ingestion(request: Request) -> IngestionService:
    return request.app.state.ingestion


def get_queries(request: Request) -> QueryService:
    return request.app.state.queries


def get_windows(request: Request) -> WindowRegistry:
    return request.app.state.windows
