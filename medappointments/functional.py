"""
Funzioni pure su collezioni di appuntamenti (filtri, ordinamenti, statistiche,
disponibilità slot).

Accettano sia oggetti con attributi snake_case (righe ORM, AppointmentRecord,
AppointmentOut) sia dict camelCase così come arrivano dall'API JSON.
Non modificano mai la sequenza in ingresso: ritornano sempre liste nuove.
"""
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from functools import reduce
from typing import Any, Callable, Iterable, Mapping, Sequence, TypeVar

from medappointments.config import DEFAULT_SLOT_HOURS
from medappointments.models import AppointmentStatus
from medappointments.schemas import to_local_naive

T = TypeVar("T")

ALL = "all"

_CAMEL = {
    "patient_name": "patientName",
    "doctor_name": "doctorName",
    "appointment_date": "appointmentDate",
}


# =========================
# Accesso ai campi
# =========================
def _field(item: Any, name: str) -> Any:
    if isinstance(item, Mapping):
        key = _CAMEL.get(name, name)
        return item[key] if key in item else item.get(name)
    return getattr(item, name)


def appointment_date(item: Any) -> datetime:
    value = _field(item, "appointment_date")
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return to_local_naive(value)


def status_of(item: Any) -> str:
    value = _field(item, "status")
    return value.value if isinstance(value, AppointmentStatus) else str(value)


def _as_datetime(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        return to_local_naive(day)
    return datetime.combine(day, time.min)


def start_of_day(day: date | datetime) -> datetime:
    return datetime.combine(_as_datetime(day).date(), time.min)


def end_of_day(day: date | datetime) -> datetime:
    return datetime.combine(_as_datetime(day).date(), time.max)


# =========================
# Filtri
# =========================
def filter_by_status(items: Sequence[T], status: AppointmentStatus | str) -> list[T]:
    if status == ALL:
        return list(items)
    wanted = AppointmentStatus(status).value
    return [a for a in items if status_of(a) == wanted]


def filter_by_doctor(items: Sequence[T], doctor: str) -> list[T]:
    if doctor == ALL:
        return list(items)
    return [a for a in items if _field(a, "doctor_name") == doctor]


def filter_by_date_range(
    items: Sequence[T],
    start: date | datetime | None,
    end: date | datetime | None,
) -> list[T]:
    """Estremi inclusivi: [inizio giornata di start, fine giornata di end]. None = nessun limite."""
    lower = start_of_day(start) if start is not None else None
    upper = end_of_day(end) if end is not None else None

    result = []
    for a in items:
        when = appointment_date(a)
        if lower is not None and when < lower:
            continue
        if upper is not None and when > upper:
            continue
        result.append(a)
    return result


def search(items: Sequence[T], query: str) -> list[T]:
    """Ricerca case-insensitive su paziente, medico e specialità."""
    q = (query or "").strip().lower()
    if not q:
        return list(items)
    return [
        a
        for a in items
        if q in str(_field(a, "patient_name")).lower()
        or q in str(_field(a, "doctor_name")).lower()
        or q in str(_field(a, "specialty")).lower()
    ]


def sort_by_date(items: Iterable[T], order: str = "asc") -> list[T]:
    if order not in ("asc", "desc"):
        raise ValueError(f"order must be 'asc' or 'desc', got {order!r}")
    # sorted è stabile anche con reverse=True
    return sorted(items, key=appointment_date, reverse=(order == "desc"))


# =========================
# Viste derivate
# =========================
def today(items: Sequence[T], now: datetime | None = None) -> list[T]:
    day = to_local_naive(now or datetime.now()).date()
    return [a for a in items if appointment_date(a).date() == day]


def upcoming(items: Sequence[T], now: datetime | None = None) -> list[T]:
    """Futuri, non annullati né completati, in ordine crescente."""
    ref = to_local_naive(now or datetime.now())
    closed = {AppointmentStatus.CANCELLED.value, AppointmentStatus.COMPLETED.value}
    return sort_by_date(
        [a for a in items if appointment_date(a) > ref and status_of(a) not in closed],
        "asc",
    )


def stats(items: Sequence[Any], now: datetime | None = None) -> dict[str, int]:
    counts = {s.value: 0 for s in AppointmentStatus}
    for a in items:
        counts[status_of(a)] = counts.get(status_of(a), 0) + 1
    return {
        "total": len(items),
        "today": len(today(items, now=now)),
        **counts,
    }


def _unique(values: Iterable[str]) -> list[str]:
    # dict conserva l'ordine di prima apparizione
    return list(dict.fromkeys(values))


def unique_doctors(items: Iterable[Any]) -> list[str]:
    return _unique(_field(a, "doctor_name") for a in items)


def unique_specialties(items: Iterable[Any]) -> list[str]:
    return _unique(_field(a, "specialty") for a in items)


# =========================
# Disponibilità
# =========================
def is_slot_available(
    items: Iterable[Any],
    proposed_start: datetime,
    doctor: str,
    duration_hours: float = DEFAULT_SLOT_HOURS,
) -> bool:
    """
    Lo slot [proposed_start, proposed_start + durata) è libero se nessun
    appuntamento non annullato dello stesso medico lo sovrappone.
    Tutti gli appuntamenti esistenti sono considerati della stessa durata.
    Intervalli che si toccano (fine A == inizio B) non sono in conflitto.
    """
    if duration_hours <= 0:
        raise ValueError("duration_hours must be positive")

    duration = timedelta(hours=duration_hours)
    start = to_local_naive(proposed_start)
    end = start + duration

    for a in items:
        if _field(a, "doctor_name") != doctor:
            continue
        if status_of(a) == AppointmentStatus.CANCELLED.value:
            continue
        existing_start = appointment_date(a)
        if start < existing_start + duration and existing_start < end:
            return False
    return True


# =========================
# Composizione
# =========================
def pipe(*fns: Callable[[T], T]) -> Callable[[T], T]:
    """pipe(f, g)(x) == g(f(x))"""
    return lambda value: reduce(lambda acc, fn: fn(acc), fns, value)


def compose(*fns: Callable[[T], T]) -> Callable[[T], T]:
    """compose(f, g)(x) == f(g(x))"""
    return lambda value: reduce(lambda acc, fn: fn(acc), reversed(fns), value)


# =========================
# Formattazione (UI)
# =========================
def _hour12(when: datetime) -> str:
    hour = when.hour % 12 or 12
    return f"{hour}:{when.minute:02d} {'AM' if when.hour < 12 else 'PM'}"


def format_date(value: datetime | str) -> str:
    when = appointment_date({"appointmentDate": value})
    return f"{when.strftime('%b')} {when.day}, {when.year}"


def format_time(value: datetime | str) -> str:
    return _hour12(appointment_date({"appointmentDate": value}))


def format_datetime(value: datetime | str) -> str:
    return f"{format_date(value)} at {format_time(value)}"
