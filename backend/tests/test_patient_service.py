from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from patients.errors import DeletionNotConfirmedError, PatientNotFoundError
from patients.service import PatientService, UpdatePatientPayload
from records.store import RecordStore


def _setup_service():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = RecordStore(engine)
    return PatientService(store), store


def test_new_patient_needs_name_and_birthday():
    service, _ = _setup_service()
    with pytest.raises(ValueError):
        service.save_patient("P-1", UpdatePatientPayload(name="Abe"))

    patient = service.save_patient("P-1", UpdatePatientPayload(name="Abe", birthday="2001-02-03"))
    assert patient.gender.value == "male"
    assert patient.body_type.value == "normal"


def test_save_merges_into_existing_patient():
    service, _ = _setup_service()
    service.save_patient(
        "P-1", UpdatePatientPayload(name="Abe", birthday="2001-02-03", gender="female", body_type="small")
    )

    patient = service.save_patient("P-1", UpdatePatientPayload(body_type="large"))

    assert patient.name == "Abe"
    assert patient.gender.value == "female"
    assert patient.body_type.value == "large"


def test_payload_validation():
    with pytest.raises(ValidationError):
        UpdatePatientPayload(name="   ")
    with pytest.raises(ValidationError):
        UpdatePatientPayload(birthday="2001/02/03")


def test_delete_requires_confirmation():
    service, store = _setup_service()
    service.save_patient("P-1", UpdatePatientPayload(name="Abe", birthday="2001-02-03"))

    with pytest.raises(DeletionNotConfirmedError):
        service.delete_patient("P-1")
    assert store.get_patient("P-1") is not None

    service.delete_patient("P-1", confirmed=True)
    assert service.get_patient("P-1") is None

    with pytest.raises(PatientNotFoundError):
        service.delete_patient("P-1", confirmed=True)


def test_delete_leaves_request_history():
    service, store = _setup_service()
    store.create_request_with_patient(
        patient_id="P-1",
        patient_fields={"name": "Abe", "birthday": "2001-02-03"},
        request_id="req-1",
        request_fields={
            "patient_id": "P-1",
            "patient_name": "Abe",
            "patient_gender": "male",
            "patient_birthday": "2001-02-03",
            "patient_age_at_request": 23,
            "patient_body_type": "normal",
            "types": ["DENTAL"],
            "points": 48,
            "timestamp": datetime(2024, 5, 1, tzinfo=timezone.utc),
            "scheduled_date": "2024-05-01",
            "status": "completed",
        },
    )

    service.delete_patient("P-1", confirmed=True)

    assert [r.id for r in store.list_requests()] == ["req-1"]
