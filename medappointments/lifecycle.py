from __future__ import annotations

from medappointments.errors import InvalidTransitionError
from medappointments.models import AppointmentStatus

S = AppointmentStatus

# pending -> confirmed -> completed, cancelled da pending o confirmed.
# completed e cancelled sono terminali.
ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED: frozenset(),
    S.CANCELLED: frozenset(),
}

# azione UI -> stato di arrivo
ACTIONS: dict[str, AppointmentStatus] = {
    "confirm": S.CONFIRMED,
    "complete": S.COMPLETED,
    "cancel": S.CANCELLED,
}


def can_transition(
    current: AppointmentStatus | str, target: AppointmentStatus | str, allow_same: bool = True
) -> bool:
    """Reimpostare lo stesso stato è un no-op, permesso salvo allow_same=False."""
    current, target = S(current), S(target)
    if current == target and allow_same:
        return True
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(
    current: AppointmentStatus | str, target: AppointmentStatus | str, allow_same: bool = True
) -> AppointmentStatus:
    if not can_transition(current, target, allow_same=allow_same):
        raise InvalidTransitionError(S(current).value, S(target).value)
    return S(target)


def is_terminal(status: AppointmentStatus | str) -> bool:
    return not ALLOWED_TRANSITIONS[S(status)]


def confirm(current: AppointmentStatus | str) -> AppointmentStatus:
    """Legale solo da pending."""
    return check_transition(current, S.CONFIRMED, allow_same=False)


def complete(current: AppointmentStatus | str) -> AppointmentStatus:
    """Legale solo da confirmed."""
    return check_transition(current, S.COMPLETED, allow_same=False)


def cancel(current: AppointmentStatus | str) -> AppointmentStatus:
    """Legale da pending o confirmed."""
    return check_transition(current, S.CANCELLED, allow_same=False)


def available_actions(current: AppointmentStatus | str) -> list[str]:
    """Azioni da mostrare in UI per lo stato corrente (confirm / complete / cancel)."""
    allowed = ALLOWED_TRANSITIONS[S(current)]
    return [action for action, target in ACTIONS.items() if target in allowed]


def apply_action(current: AppointmentStatus | str, action: str) -> AppointmentStatus:
    """Esegue un'azione UI ("confirm", "complete", "cancel") sullo stato corrente."""
    handlers = {"confirm": confirm, "complete": complete, "cancel": cancel}
    if action not in handlers:
        raise ValueError(f"Unknown action: {action}")
    return handlers[action](current)
