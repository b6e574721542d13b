from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Iterator, Mapping, Protocol

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from medappointments.db import SessionLocal, db_session
from medappointments.errors import StoreUnavailableError
from medappointments.models import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

# campi scrivibili (id escluso: lo assegna il DB)
WRITABLE_FIELDS = ("patient_name", "doctor_name", "specialty", "appointment_date", "status", "notes")


# =========================
# DTO
# =========================
@dataclass(frozen=True)
class AppointmentRecord:
    """Snapshot staccato dalla sessione: safe da passare ad API, CLI e UI."""

    id: int
    patient_name: str
    doctor_name: str
    specialty: str
    appointment_date: datetime
    status: AppointmentStatus
    notes: str | None = None

    @classmethod
    def from_orm(cls, row: Appointment) -> "AppointmentRecord":
        return cls(
            id=row.id,
            patient_name=row.patient_name,
            doctor_name=row.doctor_name,
            specialty=row.specialty,
            appointment_date=row.appointment_date,
            status=AppointmentStatus(row.status),
            notes=row.notes,
        )


def _clean(payload: Mapping[str, Any]) -> dict[str, Any]:
    data = {k: v for k, v in payload.items() if k in WRITABLE_FIELDS}
    if "status" in data:
        data["status"] = AppointmentStatus(data["status"])
    return data


class AppointmentGateway(Protocol):
    """Confine tra logica di dominio e store."""

    def list(self) -> list[AppointmentRecord]: ...

    def get(self, appointment_id: int) -> AppointmentRecord | None: ...

    def create(self, payload: Mapping[str, Any]) -> AppointmentRecord: ...

    def update(self, appointment_id: int, partial: Mapping[str, Any]) -> AppointmentRecord | None: ...

    def delete(self, appointment_id: int) -> bool: ...


# =========================
# SQLAlchemy
# =========================
class SqlAlchemyAppointmentGateway:
    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self._factory = session_factory or SessionLocal

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        try:
            with db_session(self._factory) as s:
                yield s
        except SQLAlchemyError as exc:
            logger.error("Store error during %s: %s", operation, exc)
            raise StoreUnavailableError(f"Store unavailable during {operation}") from exc

    def list(self) -> list[AppointmentRecord]:
        with self._session("list") as s:
            q = select(Appointment).order_by(Appointment.appointment_date.desc(), Appointment.id.desc())
            return [AppointmentRecord.from_orm(a) for a in s.scalars(q)]

    def get(self, appointment_id: int) -> AppointmentRecord | None:
        with self._session("get") as s:
            row = s.get(Appointment, appointment_id)
            return AppointmentRecord.from_orm(row) if row else None

    def create(self, payload: Mapping[str, Any]) -> AppointmentRecord:
        data = _clean(payload)
        data.setdefault("status", AppointmentStatus.PENDING)
        with self._session("create") as s:
            row = Appointment(**data)
            s.add(row)
            s.flush()
            return AppointmentRecord.from_orm(row)

    def update(self, appointment_id: int, partial: Mapping[str, Any]) -> AppointmentRecord | None:
        data = _clean(partial)
        with self._session("update") as s:
            row = s.get(Appointment, appointment_id)
            if not row:
                return None
            for name, value in data.items():
                setattr(row, name, value)
            s.flush()
            return AppointmentRecord.from_orm(row)

    def delete(self, appointment_id: int) -> bool:
        with self._session("delete") as s:
            result = s.execute(delete(Appointment).where(Appointment.id == appointment_id))
            return result.rowcount > 0


# =========================
# Fake in memoria (test / demo)
# =========================
class InMemoryAppointmentGateway:
    def __init__(self, records: list[AppointmentRecord] | None = None) -> None:
        self._rows: dict[int, AppointmentRecord] = {r.id: r for r in records or []}
        # gli id non vengono mai riusati, anche dopo una delete
        self._next_id = max(self._rows, default=0) + 1

    def list(self) -> list[AppointmentRecord]:
        return sorted(self._rows.values(), key=lambda r: (r.appointment_date, r.id), reverse=True)

    def get(self, appointment_id: int) -> AppointmentRecord | None:
        return self._rows.get(appointment_id)

    def create(self, payload: Mapping[str, Any]) -> AppointmentRecord:
        data = _clean(payload)
        data.setdefault("status", AppointmentStatus.PENDING)
        data.setdefault("notes", None)
        record = AppointmentRecord(id=self._next_id, **data)
        self._rows[record.id] = record
        self._next_id += 1
        return record

    def update(self, appointment_id: int, partial: Mapping[str, Any]) -> AppointmentRecord | None:
        current = self._rows.get(appointment_id)
        if current is None:
            return None
        updated = replace(current, **_clean(partial))
        self._rows[appointment_id] = updated
        return updated

    def delete(self, appointment_id: int) -> bool:
        return self._rows.pop(appointment_id, None) is not None
