from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from medappointments.db import Base


class AppointmentStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Appointment(Base):
    __tablename__ = "appointments"
    # id mai riusati, anche dopo una delete (su SQLite serve AUTOINCREMENT esplicito)
    __table_args__ = {"sqlite_autoincrement": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    patient_name: Mapped[str] = mapped_column(String(120), nullable=False)
    doctor_name: Mapped[str] = mapped_column(String(120), nullable=False)
    specialty: Mapped[str] = mapped_column(String(120), nullable=False)

    appointment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    # salvato come testo ("pending", ...), non come enum nativo del DB
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            length=16,
            validate_strings=True,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=AppointmentStatus.PENDING,
        nullable=False,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"Appointment({self.id}, {self.patient_name} -> {self.doctor_name}, {self.appointment_date}, {self.status.value})"
