import os
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

# Set testing environment before the app reads its settings
os.environ["TESTING"] = "1"
os.environ["STORE_BACKEND"] = "memory"
os.environ["REMINDERS_ENABLED"] = "0"

from hospital_booking.main import app
from hospital_booking.api.deps import get_store
from hospital_booking.core.database import init_db, make_engine
from hospital_booking.repositories import (
    JsonFileAppointmentStore, MemoryAppointmentStore, SqlAppointmentStore,
)
from hospital_booking.schemas.appointment import AppointmentCreate
from hospital_booking.services.booking_service import BookingService
from hospital_booking.services.catalog import Catalog

FIXED_NOW = datetime(2025, 6, 10, 7, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock returning a fixed instant that tests can move forward."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def booking_payload(**overrides) -> dict:
    """JSON body of a valid booking for doctor 1 on 2025-06-10 at 08:00."""
    payload = {
        "patientName": "Amina Juma",
        "phone": "0712345678",
        "email": "amina@example.com",
        "date": "2025-06-10",
        "time": "08:00",
        "doctorId": 1,
        "department": "general",
        "symptoms": "Headache",
    }
    payload.update(overrides)
    return payload


def booking_request(**overrides) -> AppointmentCreate:
    return AppointmentCreate.model_validate(booking_payload(**overrides))


def make_sql_store(path) -> SqlAppointmentStore:
    engine = make_engine(f"sqlite:///{path}")
    init_db(bind=engine)
    return SqlAppointmentStore(sessionmaker(autocommit=False, autoflush=False, bind=engine))


@pytest.fixture
def catalog():
    return Catalog()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryAppointmentStore()


@pytest.fixture(params=["memory", "file", "sql"])
def any_store(request, tmp_path, catalog):
    """Each storage backend in turn."""
    if request.param == "memory":
        yield MemoryAppointmentStore()
    elif request.param == "file":
        yield JsonFileAppointmentStore(str(tmp_path / "hospital.json"), catalog.list_doctors())
    else:
        sql_store = make_sql_store(tmp_path / "hospital.db")
        yield sql_store
        sql_store.close()


@pytest.fixture
def booking_service(store, catalog, clock):
    return BookingService(store, catalog, clock=clock)


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client
    app.dependency_overrides.clear()
