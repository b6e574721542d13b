from __future__ import annotations


class AppointmentError(Exception):
    """Errore base del dominio appuntamenti."""


class StoreUnavailableError(AppointmentError):
    """Il database non risponde o la query è fallita."""


class InvalidTransitionError(AppointmentError):
    def __init__(self, current: str, target: str) -> None:
        self.current = current
        self.target = target
        super().__init__(f"Cannot change status from {current} to {target}")
