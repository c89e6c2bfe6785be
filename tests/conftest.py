import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from shared.measurement_store import InMemoryMeasurementStore


@pytest.fixture
def store():
    return InMemoryMeasurementStore()


@pytest.fixture
def settings():
    return Settings(store_backend="memory", smoothing_window_size=5)


@pytest.fixture
def client(settings, store):
    with TestClient(create_app(settings=settings, store=store)) as test_client:
        yield test_client
