from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from medappointments.models import AppointmentStatus

FUTURE_DATE_MESSAGE = "Appointment date must be in the future"


def to_local_naive(value: datetime) -> datetime:
    """Gli orari con fuso vengono portati all'ora locale e salvati naive."""
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


class _WireModel(BaseModel):
    # JSON in camelCase (patientName, ...), attributi Python in snake_case
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )


class AppointmentCreate(_WireModel):
    patient_name: str = Field(min_length=1)
    doctor_name: str = Field(min_length=1)
    specialty: str = Field(min_length=1)
    appointment_date: datetime
    status: AppointmentStatus = AppointmentStatus.PENDING
    notes: str | None = None

    @field_validator("appointment_date")
    @classmethod
    def _must_be_future(cls, value: datetime, info: ValidationInfo) -> datetime:
        value = to_local_naive(value)
        now = (info.context or {}).get("now") or datetime.now()
        if value <= to_local_naive(now):
            raise ValueError(FUTURE_DATE_MESSAGE)
        return value


class AppointmentUpdate(_WireModel):
    """Aggiornamento parziale: la data NON deve essere nel futuro."""

    patient_name: str | None = Field(default=None, min_length=1)
    doctor_name: str | None = Field(default=None, min_length=1)
    specialty: str | None = Field(default=None, min_length=1)
    appointment_date: datetime | None = None
    status: AppointmentStatus | None = None
    notes: str | None = None

    @field_validator("patient_name", "doctor_name", "specialty", "appointment_date", "status", mode="before")
    @classmethod
    def _not_null(cls, value: Any) -> Any:
        # solo notes può essere azzerato con null
        if value is None:
            raise ValueError("Cannot be null")
        return value

    @field_validator("appointment_date")
    @classmethod
    def _normalize_date(cls, value: datetime | None) -> datetime | None:
        return to_local_naive(value) if value is not None else None


class AppointmentOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    patient_name: str
    doctor_name: str
    specialty: str
    appointment_date: datetime
    status: AppointmentStatus
    notes: str | None = None


# =========================
# Esito validazione
# =========================
@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    value: dict[str, Any] | None = None
    errors: dict[str, list[str]] = field(default_factory=dict)


def _message(err: Mapping[str, Any]) -> str:
    if err["type"] == "missing":
        return "Required"
    if err["type"] == "string_too_short":
        return "Must not be empty"
    if err["type"] == "value_error" and "error" in err.get("ctx", {}):
        return str(err["ctx"]["error"])
    return str(err["msg"])


def field_errors(exc: ValidationError, model: type[BaseModel]) -> dict[str, list[str]]:
    """ValidationError pydantic -> {campo camelCase: [messaggi]}."""
    aliases = {name: (info.alias or name) for name, info in model.model_fields.items()}
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        key = aliases.get(str(loc[0]), str(loc[0])) if loc else "_root"
        errors.setdefault(key, []).append(_message(err))
    return errors


def _validate(model: type[BaseModel], data: Any, context: dict[str, Any] | None = None) -> tuple[BaseModel | None, dict[str, list[str]]]:
    if not isinstance(data, Mapping):
        return None, {"_root": ["Expected a JSON object"]}
    try:
        return model.model_validate(dict(data), context=context), {}
    except ValidationError as exc:
        return None, field_errors(exc, model)


def validate_create(data: Any, now: datetime | None = None) -> ValidationResult:
    """
    Valida il payload di creazione.
    Ritorna il payload normalizzato (chiavi snake_case, senza id) oppure
    la mappa campo -> messaggi.
    """
    parsed, errors = _validate(AppointmentCreate, data, context={"now": now})
    if parsed is None:
        return ValidationResult(ok=False, errors=errors)
    return ValidationResult(ok=True, value=parsed.model_dump())


def validate_update(data: Any) -> ValidationResult:
    """Come validate_create, ma tutti i campi sono opzionali. {} è un no-op valido."""
    parsed, errors = _validate(AppointmentUpdate, data)
    if parsed is None:
        return ValidationResult(ok=False, errors=errors)
    return ValidationResult(ok=True, value=parsed.model_dump(exclude_unset=True))
