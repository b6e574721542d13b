from __future__ import annotations

import argparse
from datetime import date, datetime
from typing import Sequence

from medappointments.config import DEFAULT_SLOT_HOURS, configure_logging
from medappointments.db import init_db
from medappointments.errors import InvalidTransitionError
from medappointments.functional import (
    filter_by_date_range,
    filter_by_doctor,
    filter_by_status,
    format_datetime,
    is_slot_available,
    pipe,
    search,
    sort_by_date,
    stats,
)
from medappointments.lifecycle import apply_action
from medappointments.schemas import validate_create
from medappointments.seed import seed_demo
from medappointments.storage import AppointmentGateway, AppointmentRecord, SqlAlchemyAppointmentGateway


def _print_row(a: AppointmentRecord) -> None:
    print(
        f"{a.id} | {format_datetime(a.appointment_date)} | {a.status.value:<9} | "
        f"{a.patient_name} -> Dr. {a.doctor_name} ({a.specialty}) | {a.notes or '-'}"
    )


def cmd_init(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    init_db()
    print("DB inizializzato.")


def cmd_seed(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    created = seed_demo(
        gateway,
        count=args.count,
        days_back=args.days_back,
        days_ahead=args.days_ahead,
        force=args.force,
    )
    print(f"Appuntamenti demo creati: {len(created)}")


def cmd_list(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    start = date.fromisoformat(args.date_from) if args.date_from else None
    end = date.fromisoformat(args.date_to) if args.date_to else None

    view = pipe(
        lambda items: search(items, args.search or ""),
        lambda items: filter_by_status(items, args.status),
        lambda items: filter_by_doctor(items, args.doctor),
        lambda items: filter_by_date_range(items, start, end),
        lambda items: sort_by_date(items, args.order),
    )
    items = view(gateway.list())
    if not items:
        print("Nessun appuntamento.")
        return
    for a in items:
        _print_row(a)


def cmd_add(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    result = validate_create(
        {
            "patientName": args.patient,
            "doctorName": args.doctor,
            "specialty": args.specialty,
            "appointmentDate": args.date,  # formato: 2026-01-14T10:30
            "status": args.status,
            "notes": args.notes,
        }
    )
    if not result.ok:
        for name, messages in result.errors.items():
            print(f"{name}: {'; '.join(messages)}")
        raise SystemExit(2)

    if not is_slot_available(gateway.list(), result.value["appointment_date"], result.value["doctor_name"]):
        print("Attenzione: il medico ha già un appuntamento in questo orario.")

    a = gateway.create(result.value)
    print(f"Appuntamento creato: {a.id}")


def cmd_transition(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    a = gateway.get(args.appointment_id)
    if a is None:
        print("Appuntamento non trovato.")
        raise SystemExit(1)
    try:
        target = apply_action(a.status, args.action)
    except InvalidTransitionError as e:
        print(f"Operazione non permessa: {e}")
        raise SystemExit(1)

    gateway.update(a.id, {"status": target})
    print(f"Appuntamento {a.id}: {a.status.value} -> {target.value}")


def cmd_delete(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    if not gateway.delete(args.appointment_id):
        print("Appuntamento non trovato.")
        raise SystemExit(1)
    print("Cancellato.")


def cmd_stats(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    for key, value in stats(gateway.list()).items():
        print(f"{key:<10} {value}")


def cmd_slot(args: argparse.Namespace, gateway: AppointmentGateway) -> None:
    start = datetime.fromisoformat(args.start)
    free = is_slot_available(gateway.list(), start, args.doctor, args.hours)
    print("Slot libero." if free else "Slot occupato.")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="medappointments", description="CLI Medical Appointments")
    sub = p.add_subparsers(required=True)

    p_init = sub.add_parser("init", help="Crea le tabelle")
    p_init.set_defaults(func=cmd_init)

    p_seed = sub.add_parser("seed", help="Carica appuntamenti demo")
    p_seed.add_argument("--count", type=int, default=40)
    p_seed.add_argument("--days-back", type=int, default=30)
    p_seed.add_argument("--days-ahead", type=int, default=30)
    p_seed.add_argument("--force", action="store_true", help="Genera anche se il DB non è vuoto")
    p_seed.set_defaults(func=cmd_seed)

    p_list = sub.add_parser("list", help="Lista appuntamenti")
    p_list.add_argument("--status", default="all", choices=["all", "pending", "confirmed", "completed", "cancelled"])
    p_list.add_argument("--doctor", default="all")
    p_list.add_argument("--from", dest="date_from", default=None, help="ISO date es: 2026-01-01")
    p_list.add_argument("--to", dest="date_to", default=None, help="ISO date es: 2026-01-31")
    p_list.add_argument("--search", default=None)
    p_list.add_argument("--order", default="asc", choices=["asc", "desc"])
    p_list.set_defaults(func=cmd_list)

    p_add = sub.add_parser("add", help="Crea appuntamento")
    p_add.add_argument("--patient", required=True)
    p_add.add_argument("--doctor", required=True)
    p_add.add_argument("--specialty", required=True)
    p_add.add_argument("--date", required=True, help="ISO datetime es: 2026-01-14T10:30")
    p_add.add_argument("--status", default="pending")
    p_add.add_argument("--notes", default=None)
    p_add.set_defaults(func=cmd_add)

    for action, help_text in (
        ("confirm", "Conferma (da pending)"),
        ("complete", "Completa (da confirmed)"),
        ("cancel", "Annulla (da pending o confirmed)"),
    ):
        p_tr = sub.add_parser(action, help=help_text)
        p_tr.add_argument("appointment_id", type=int)
        p_tr.set_defaults(func=cmd_transition, action=action)

    p_del = sub.add_parser("delete", help="Elimina appuntamento")
    p_del.add_argument("appointment_id", type=int)
    p_del.set_defaults(func=cmd_delete)

    p_stats = sub.add_parser("stats", help="Statistiche")
    p_stats.set_defaults(func=cmd_stats)

    p_slot = sub.add_parser("slot", help="Verifica disponibilità medico")
    p_slot.add_argument("--doctor", required=True)
    p_slot.add_argument("--start", required=True, help="ISO datetime es: 2026-01-14T10:30")
    p_slot.add_argument("--hours", type=float, default=DEFAULT_SLOT_HOURS)
    p_slot.set_defaults(func=cmd_slot)

    return p


def main(argv: Sequence[str] | None = None, gateway: AppointmentGateway | None = None) -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if gateway is None:
        init_db()  # garantisce tabelle
        gateway = SqlAlchemyAppointmentGateway()
    args.func(args, gateway)


if __name__ == "__main__":
    main()
