from datetime import datetime, timedelta, timezone

import pytest

from medappointments.models import AppointmentStatus
from medappointments.schemas import FUTURE_DATE_MESSAGE, AppointmentOut, validate_create, validate_update

NOW = datetime(2026, 3, 10, 12, 0)


def payload(**overrides):
    data = {
        "patientName": "Jane Doe",
        "doctorName": "Smith",
        "specialty": "Cardiology",
        "appointmentDate": "2026-03-11T09:30:00",
    }
    data.update(overrides)
    return data


class TestValidateCreate:
    def test_valid_payload_defaults_to_pending(self):
        result = validate_create(payload(), now=NOW)

        assert result.ok
        assert result.errors == {}
        assert result.value == {
            "patient_name": "Jane Doe",
            "doctor_name": "Smith",
            "specialty": "Cardiology",
            "appointment_date": datetime(2026, 3, 11, 9, 30),
            "status": AppointmentStatus.PENDING,
            "notes": None,
        }
        assert "id" not in result.value

    def test_explicit_status_is_kept(self):
        result = validate_create(payload(status="confirmed"), now=NOW)
        assert result.value["status"] == AppointmentStatus.CONFIRMED

    @pytest.mark.parametrize("when", ["2026-03-10T12:00:00", "2026-03-10T11:59:59", "2020-01-01T00:00:00"])
    def test_past_or_present_date_is_rejected(self, when):
        result = validate_create(payload(appointmentDate=when), now=NOW)

        assert not result.ok
        assert result.errors == {"appointmentDate": [FUTURE_DATE_MESSAGE]}

    def test_unparseable_date_is_rejected(self):
        result = validate_create(payload(appointmentDate="not a date"), now=NOW)
        assert list(result.errors) == ["appointmentDate"]

    @pytest.mark.parametrize("name", ["patientName", "doctorName", "specialty"])
    def test_empty_required_text_is_rejected(self, name):
        result = validate_create(payload(**{name: ""}), now=NOW)
        assert result.errors == {name: ["Must not be empty"]}

    def test_whitespace_only_counts_as_empty(self):
        result = validate_create(payload(patientName="   "), now=NOW)
        assert "patientName" in result.errors

    def test_missing_fields_reported_per_field(self):
        result = validate_create({}, now=NOW)

        assert not result.ok
        assert set(result.errors) == {"patientName", "doctorName", "specialty", "appointmentDate"}
        assert result.errors["patientName"] == ["Required"]

    def test_unknown_status_is_rejected(self):
        result = validate_create(payload(status="rescheduled"), now=NOW)
        assert list(result.errors) == ["status"]

    @pytest.mark.parametrize("notes", [None, "", "Bring test results"])
    def test_notes_optional(self, notes):
        assert validate_create(payload(notes=notes), now=NOW).ok

    def test_aware_dates_are_normalized_to_local_naive(self):
        when = datetime.now(timezone.utc) + timedelta(days=1)
        result = validate_create(payload(appointmentDate=when.isoformat()))

        assert result.ok
        assert result.value["appointment_date"].tzinfo is None

    def test_non_mapping_body(self):
        result = validate_create(["nope"], now=NOW)
        assert result.errors == {"_root": ["Expected a JSON object"]}

    def test_unknown_keys_ignored(self):
        result = validate_create(payload(id=99, extra="x"), now=NOW)
        assert result.ok
        assert "id" not in result.value


class TestValidateUpdate:
    def test_empty_update_is_a_valid_no_op(self):
        result = validate_update({})
        assert result.ok
        assert result.value == {}

    def test_only_provided_fields_are_returned(self):
        result = validate_update({"status": "confirmed"})
        assert result.value == {"status": AppointmentStatus.CONFIRMED}

    def test_past_date_allowed_on_update(self):
        result = validate_update({"appointmentDate": "2020-01-01T10:00:00"})
        assert result.value == {"appointment_date": datetime(2020, 1, 1, 10, 0)}

    def test_notes_can_be_cleared(self):
        assert validate_update({"notes": None}).value == {"notes": None}

    @pytest.mark.parametrize("name", ["patientName", "doctorName", "specialty", "status", "appointmentDate"])
    def test_null_not_allowed_for_required_fields(self, name):
        result = validate_update({name: None})
        assert not result.ok
        assert name in result.errors

    def test_same_rules_for_text_fields(self):
        result = validate_update({"doctorName": "", "status": "unknown"})
        assert set(result.errors) == {"doctorName", "status"}


def test_wire_representation_uses_camel_case():
    out = AppointmentOut(
        id=1,
        patient_name="Jane Doe",
        doctor_name="Smith",
        specialty="Cardiology",
        appointment_date=datetime(2026, 3, 11, 9, 30),
        status=AppointmentStatus.PENDING,
    )

    assert out.model_dump(mode="json", by_alias=True) == {
        "id": 1,
        "patientName": "Jane Doe",
        "doctorName": "Smith",
        "specialty": "Cardiology",
        "appointmentDate": "2026-03-11T09:30:00",
        "status": "pending",
        "notes": None,
    }
