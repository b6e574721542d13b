from __future__ import annotations

# Catalogo usato da UI e seed. Il backend non lo impone: basta che i campi non siano vuoti.
DOCTORS_BY_SPECIALTY: dict[str, list[str]] = {
    "Cardiology": ["Smith", "Johnson", "Williams"],
    "Dermatology": ["Brown", "Davis", "Miller"],
    "Neurology": ["Wilson", "Moore", "Taylor"],
    "Pediatrics": ["Anderson", "Thomas", "Jackson"],
    "Orthopedics": ["White", "Harris", "Martin"],
    "Oncology": ["Thompson", "Garcia", "Martinez"],
    "Psychiatry": ["Robinson", "Clark", "Rodriguez"],
    "General Practice": ["Lewis", "Lee", "Walker"],
    "Surgery": ["Hall", "Allen", "Young"],
    "Radiology": ["King", "Wright", "Scott"],
}

SPECIALTIES = list(DOCTORS_BY_SPECIALTY)

TIME_SLOTS = [
    "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    "12:00", "12:30", "14:00", "14:30", "15:00", "15:30",
    "16:00", "16:30", "17:00",
]


def doctor_display_name(surname: str) -> str:
    return f"Dr. {surname}"


def doctors_for(specialty: str) -> list[str]:
    """Medici (cognome, come salvato in doctor_name) di una specialità; [] se sconosciuta."""
    return list(DOCTORS_BY_SPECIALTY.get(specialty, []))
