from __future__ import annotations

import logging
import re
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator

from fastapi import Body, Depends, FastAPI, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from medappointments.config import DEFAULT_SLOT_HOURS, configure_logging
from medappointments.db import init_db
from medappointments.errors import InvalidTransitionError
from medappointments.functional import is_slot_available, stats
from medappointments.lifecycle import check_transition
from medappointments.schemas import AppointmentOut, validate_create, validate_update
from medappointments.storage import AppointmentGateway, SqlAlchemyAppointmentGateway

logger = logging.getLogger(__name__)

INVALID_ID = "Invalid appointment ID"
NOT_FOUND = "Appointment not found"
VALIDATION_FAILED = "Validation failed"

_ID_RE = re.compile(r"^\s*[+-]?\d+\s*$")
# INTEGER a 64 bit con segno: oltre non è un id valido per lo store
_ID_MIN, _ID_MAX = -(2**63), 2**63 - 1


# =========================
# Errori HTTP
# =========================
class ApiError(Exception):
    """Errore già tradotto in status code + corpo {message, errors?}."""

    def __init__(self, status_code: int, message: str, errors: dict[str, list[str]] | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = errors


def _error_body(message: str, errors: dict[str, list[str]] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"message": message}
    if errors is not None:
        body["errors"] = errors
    return body


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(exc.message, exc.errors))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # corpo non JSON / non oggetto, query string invalida -> 400 come gli errori di schema
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = "_root" if not loc or err.get("type") == "json_invalid" else loc[0]
        errors.setdefault(key, []).append(str(err.get("msg", "Invalid value")))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_error_body(VALIDATION_FAILED, errors))


@contextmanager
def _failures(message: str) -> Iterator[None]:
    """Qualsiasi errore inatteso -> 500 con messaggio fisso, dettaglio solo nel log."""
    try:
        yield
    except ApiError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, message) from exc


def parse_id(raw: str) -> int:
    if not _ID_RE.match(raw):
        raise ApiError(status.HTTP_400_BAD_REQUEST, INVALID_ID)
    value = int(raw)
    if not _ID_MIN <= value <= _ID_MAX:
        raise ApiError(status.HTTP_400_BAD_REQUEST, INVALID_ID)
    return value


# =========================
# Dipendenze
# =========================
def get_gateway(request: Request) -> AppointmentGateway:
    return request.app.state.gateway


# =========================
# App
# =========================
def create_app(gateway: AppointmentGateway | None = None) -> FastAPI:
    configure_logging()

    app = FastAPI(title="Medical Appointments API", version="1.0.0")
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    if gateway is None:
        gateway = SqlAlchemyAppointmentGateway()

        @app.on_event("startup")
        def startup() -> None:
            # crea la tabella se manca (idempotente)
            init_db()

    app.state.gateway = gateway

    @app.get("/api/appointments", response_model=list[AppointmentOut])
    def list_appointments(gw: AppointmentGateway = Depends(get_gateway)) -> list[AppointmentOut]:
        with _failures("Failed to fetch appointments"):
            return [AppointmentOut.model_validate(a) for a in gw.list()]

    @app.get("/api/appointments/stats")
    def appointment_stats(gw: AppointmentGateway = Depends(get_gateway)) -> dict[str, int]:
        with _failures("Failed to compute statistics"):
            return stats(gw.list())

    @app.get("/api/appointments/availability")
    def slot_availability(
        doctor: str = Query(..., min_length=1),
        start: datetime = Query(...),
        duration_hours: float = Query(DEFAULT_SLOT_HOURS, alias="durationHours", gt=0),
        gw: AppointmentGateway = Depends(get_gateway),
    ) -> dict[str, Any]:
        with _failures("Failed to check availability"):
            available = is_slot_available(gw.list(), start, doctor, duration_hours)
            return {"doctor": doctor, "start": start.isoformat(), "durationHours": duration_hours, "available": available}

    @app.get("/api/appointments/{appointment_id}", response_model=AppointmentOut)
    def get_appointment(appointment_id: str, gw: AppointmentGateway = Depends(get_gateway)) -> AppointmentOut:
        with _failures("Failed to fetch appointment"):
            aid = parse_id(appointment_id)
            appointment = gw.get(aid)
            if appointment is None:
                raise ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND)
            return AppointmentOut.model_validate(appointment)

    @app.post("/api/appointments", response_model=AppointmentOut, status_code=status.HTTP_201_CREATED)
    def create_appointment(
        payload: dict[str, Any] = Body(...),
        gw: AppointmentGateway = Depends(get_gateway),
    ) -> AppointmentOut:
        with _failures("Failed to create appointment"):
            result = validate_create(payload)
            if not result.ok:
                raise ApiError(status.HTTP_400_BAD_REQUEST, VALIDATION_FAILED, result.errors)

            appointment = gw.create(result.value)
            logger.info("Appointment %s created for %s", appointment.id, appointment.doctor_name)
            return AppointmentOut.model_validate(appointment)

    @app.patch("/api/appointments/{appointment_id}", response_model=AppointmentOut)
    def update_appointment(
        appointment_id: str,
        payload: Any = Body(None),
        gw: AppointmentGateway = Depends(get_gateway),
    ) -> AppointmentOut:
        with _failures("Failed to update appointment"):
            aid = parse_id(appointment_id)
            existing = gw.get(aid)
            if existing is None:
                raise ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND)

            result = validate_update({} if payload is None else payload)
            if not result.ok:
                raise ApiError(status.HTTP_400_BAD_REQUEST, VALIDATION_FAILED, result.errors)

            data = result.value
            if "status" in data:
                try:
                    check_transition(existing.status, data["status"])
                except InvalidTransitionError as exc:
                    raise ApiError(
                        status.HTTP_400_BAD_REQUEST, "Invalid status transition", {"status": [str(exc)]}
                    ) from exc

            appointment = gw.update(aid, data)
            if appointment is None:
                # cancellato tra la get e l'update
                raise ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND)

            if appointment.status != existing.status:
                logger.info(
                    "Appointment %s: %s -> %s", aid, existing.status.value, appointment.status.value
                )
            return AppointmentOut.model_validate(appointment)

    @app.delete("/api/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_appointment(appointment_id: str, gw: AppointmentGateway = Depends(get_gateway)) -> Response:
        with _failures("Failed to delete appointment"):
            aid = parse_id(appointment_id)
            if not gw.delete(aid):
                raise ApiError(status.HTTP_404_NOT_FOUND, NOT_FOUND)
            logger.info("Appointment %s deleted", aid)
            return Response(status_code=status.HTTP_204_NO_CONTENT)

    return app


app = create_app()
