from __future__ import annotations

import logging
import random
from datetime import date, datetime, time, timedelta

from medappointments.catalog import DOCTORS_BY_SPECIALTY, TIME_SLOTS
from medappointments.functional import is_slot_available
from medappointments.models import AppointmentStatus
from medappointments.storage import AppointmentGateway, AppointmentRecord

logger = logging.getLogger(__name__)

# =========================
# Config generazione
# =========================
RANDOM_SEED = 42

FIRST_NAMES = [
    "James", "Mary", "Robert", "Patricia", "John", "Jennifer", "Michael", "Linda",
    "David", "Elizabeth", "William", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
]
LAST_NAMES = [
    "Carter", "Mitchell", "Perez", "Roberts", "Turner", "Phillips", "Campbell", "Parker",
    "Evans", "Edwards", "Collins", "Stewart", "Sanchez", "Morris", "Rogers",
]
NOTES = [
    None,
    "Follow-up on previous visit.",
    "Patient reports recurring symptoms.",
    "Routine check-up.",
    "Bring previous test results.",
]

# Affluenza per giorno della settimana (0=lun...6=dom)
WEEKDAY_FACTOR = {
    0: 1.15,
    1: 1.05,
    2: 1.00,
    3: 1.05,
    4: 1.10,
    5: 0.55,
    6: 0.00,  # chiuso
}


def _status_for(when: datetime, now: datetime, rng: random.Random) -> AppointmentStatus:
    """Stato coerente con la data: il passato è chiuso, il futuro è ancora aperto."""
    if when.date() < now.date():
        return AppointmentStatus.COMPLETED if rng.random() < 0.92 else AppointmentStatus.CANCELLED
    if when <= now:
        r = rng.random()
        if r < 0.65:
            return AppointmentStatus.COMPLETED
        if r < 0.85:
            return AppointmentStatus.CONFIRMED
        return AppointmentStatus.CANCELLED
    r = rng.random()
    if r < 0.5:
        return AppointmentStatus.PENDING
    if r < 0.9:
        return AppointmentStatus.CONFIRMED
    return AppointmentStatus.CANCELLED


def _slot(day: date, hm: str) -> datetime:
    hour, minute = map(int, hm.split(":"))
    return datetime.combine(day, time(hour, minute))


def seed_demo(
    gateway: AppointmentGateway,
    count: int = 40,
    days_back: int = 30,
    days_ahead: int = 30,
    seed: int = RANDOM_SEED,
    force: bool = False,
    now: datetime | None = None,
) -> list[AppointmentRecord]:
    """
    Popola lo store con appuntamenti demo in [oggi - days_back, oggi + days_ahead]:
    - niente domeniche, meno sabati
    - mai due appuntamenti sovrapposti per lo stesso medico
    - stato coerente con la data
    Idempotente: se lo store ha già righe non fa nulla (salvo force=True).
    """
    now = now or datetime.now()
    existing = gateway.list()
    if existing and not force:
        logger.info("Seed skipped: store already has %d appointments", len(existing))
        return []

    rng = random.Random(seed)
    specialties = list(DOCTORS_BY_SPECIALTY)
    created: list[AppointmentRecord] = []

    attempts = 0
    while len(created) < count and attempts < count * 20:
        attempts += 1

        day = now.date() + timedelta(days=rng.randint(-days_back, days_ahead))
        if rng.random() > WEEKDAY_FACTOR[day.weekday()]:
            continue

        specialty = rng.choice(specialties)
        doctor = rng.choice(DOCTORS_BY_SPECIALTY[specialty])
        start = _slot(day, rng.choice(TIME_SLOTS))

        if not is_slot_available(existing, start, doctor):
            continue

        record = gateway.create(
            {
                "patient_name": f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                "doctor_name": doctor,
                "specialty": specialty,
                "appointment_date": start,
                "status": _status_for(start, now, rng),
                "notes": rng.choice(NOTES),
            }
        )
        existing.append(record)
        created.append(record)

    logger.info("Seed created %d demo appointments", len(created))
    return created
