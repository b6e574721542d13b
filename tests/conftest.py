"""
Fixture condivise: gateway in memoria, gateway SQLite in memoria e client HTTP.
"""
from __future__ import annotations

import os
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("DATABASE_URL", "sqlite://")

from medappointments.api_main import create_app  # noqa: E402
from medappointments.db import init_db, make_engine, make_session_factory  # noqa: E402
from medappointments.models import AppointmentStatus  # noqa: E402
from medappointments.storage import (  # noqa: E402
    AppointmentRecord,
    InMemoryAppointmentGateway,
    SqlAlchemyAppointmentGateway,
)


@pytest.fixture
def memory_gateway() -> InMemoryAppointmentGateway:
    return InMemoryAppointmentGateway()


@pytest.fixture
def sql_gateway() -> SqlAlchemyAppointmentGateway:
    engine = make_engine("sqlite://", echo=False)
    init_db(engine)
    yield SqlAlchemyAppointmentGateway(make_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def gateway(request, memory_gateway, sql_gateway):
    """Stessi test su entrambe le implementazioni del gateway."""
    return memory_gateway if request.param == "memory" else sql_gateway


@pytest.fixture
def client(sql_gateway) -> TestClient:
    return TestClient(create_app(gateway=sql_gateway))


@pytest.fixture
def future_date() -> datetime:
    return (datetime.now() + timedelta(days=2)).replace(hour=10, minute=0, second=0, microsecond=0)


@pytest.fixture
def valid_payload(future_date) -> dict:
    return {
        "patientName": "Jane Doe",
        "doctorName": "Smith",
        "specialty": "Cardiology",
        "appointmentDate": future_date.isoformat(),
        "notes": "First visit",
    }


def make_record(
    id: int,
    when: datetime,
    doctor: str = "Smith",
    status: AppointmentStatus | str = AppointmentStatus.PENDING,
    patient: str = "Jane Doe",
    specialty: str = "Cardiology",
    notes: str | None = None,
) -> AppointmentRecord:
    return AppointmentRecord(
        id=id,
        patient_name=patient,
        doctor_name=doctor,
        specialty=specialty,
        appointment_date=when,
        status=AppointmentStatus(status),
        notes=notes,
    )
