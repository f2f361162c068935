import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.services.booking_service import BookingService, get_booking_service
from app.services.store_service import JsonStore


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "data" / "bookings.json")


@pytest.fixture
def service(store):
    return BookingService(store)


@pytest.fixture
def client(service):
    # Route every request to a service backed by a temporary file
    app.dependency_overrides[get_booking_service] = lambda: service
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
