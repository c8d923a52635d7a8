from __future__ import annotations

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from exposure import ImagingType
from operators.service import OperatorDirectory
from records.models import RequestStatus
from records.store import RecordStore
from scheduling.errors import (
    IncompleteRadiationLogError,
    RequestNotFoundError,
    RequestStateError,
    RequestValidationError,
    ValidationReason,
)
from scheduling.models import ClinicIdentity, CreateRequestPayload
from scheduling.service import RequestService

NOW = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)


def _setup_service(with_operators: bool = True):
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    store = RecordStore(engine)
    operators = OperatorDirectory(engine) if with_operators else None
    return RequestService(store, operators), store, operators


def _payload(**overrides) -> CreateRequestPayload:
    data = {
        "patient_id": "P-100",
        "patient_name": "Hanako Sato",
        "patient_gender": "female",
        "patient_birthday": "1990-04-01",
        "patient_body_type": "normal",
        "types": ["PANORAMA"],
    }
    data.update(overrides)
    return CreateRequestPayload(**data)


class TestCreateRequest:
    def test_creates_pending_request_and_patient(self):
        service, store, _ = _setup_service()

        request = service.create_request(_payload(notes="check lower left"), now=NOW)

        assert request.status is RequestStatus.PENDING
        assert request.points == 402
        assert request.patient_age_at_request == 34
        assert request.scheduled_date == "2024-05-01"
        assert request.scheduled_time == "09:30"
        assert request.location_from == "Exam Room"
        assert request.location_to == "Waiting Room"
        assert request.bitewing_sides is None
        assert request.radiation_logs == {}
        assert request.timestamp == NOW

        patient = store.get_patient("P-100")
        assert patient is not None
        assert patient.name == "Hanako Sato"

    def test_age_is_taken_at_the_scheduled_date(self):
        service, _, _ = _setup_service()
        request = service.create_request(
            _payload(patient_birthday="2012-06-15", scheduled_date="2024-06-14"), now=NOW
        )
        assert request.patient_age_at_request == 11

    def test_bitewing_points_follow_sides(self):
        service, _, _ = _setup_service()
        request = service.create_request(
            _payload(types=["BITEWING", "PANORAMA"], bitewing_sides=["right", "left"]), now=NOW
        )
        assert request.points == 402 + 96
        assert [s.value for s in request.bitewing_sides] == ["right", "left"]

    def test_sides_dropped_without_bitewing(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(types=["DENTAL"], bitewing_sides=["left"]), now=NOW)
        assert request.bitewing_sides is None
        assert request.points == 48

    def test_existing_patient_is_updated(self):
        service, store, _ = _setup_service()
        store.upsert_patient("P-100", {"name": "Old Name", "birthday": "1990-04-01", "body_type": "small"})

        service.create_request(_payload(patient_body_type="large"), now=NOW)

        patient = store.get_patient("P-100")
        assert patient.name == "Hanako Sato"
        assert patient.body_type.value == "large"

    @pytest.mark.parametrize(
        "overrides, reason",
        [
            ({"patient_id": "  "}, ValidationReason.MISSING_PATIENT_INFO),
            ({"patient_name": ""}, ValidationReason.MISSING_PATIENT_INFO),
            ({"patient_birthday": ""}, ValidationReason.MISSING_PATIENT_INFO),
            ({"types": []}, ValidationReason.NO_IMAGING_TYPE),
            ({"types": ["BITEWING"]}, ValidationReason.BITEWING_SIDE_REQUIRED),
            ({"types": ["DENTAL"], "selected_teeth": [11, 19]}, ValidationReason.INVALID_TOOTH),
            ({"patient_birthday": "01/04/1990"}, ValidationReason.INVALID_DATE),
            ({"scheduled_date": "2024-02-30"}, ValidationReason.INVALID_DATE),
            ({"scheduled_time": "25:00"}, ValidationReason.INVALID_DATE),
            ({"patient_birthday": "2024-05-02", "scheduled_date": "2024-05-01"}, ValidationReason.INVALID_DATE),
            ({"patient_birthday": "2024-06-01"}, ValidationReason.INVALID_DATE),
        ],
    )
    def test_rejected_before_any_write(self, overrides, reason):
        service, store, _ = _setup_service()

        with pytest.raises(RequestValidationError) as excinfo:
            service.create_request(_payload(**overrides), now=NOW)

        assert excinfo.value.reason is reason
        assert store.list_patients() == []
        assert store.list_requests() == []

    def test_birthday_on_the_scheduled_date_is_accepted(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(patient_birthday="2024-05-01"), now=NOW)
        assert request.patient_age_at_request == 0

    def test_snapshot_is_not_touched_by_later_patient_edits(self):
        service, store, _ = _setup_service()
        request = service.create_request(_payload(), now=NOW)

        store.upsert_patient("P-100", {"name": "Hanako Tanaka", "birthday": "1991-01-01"})
        store.delete_patient("P-100")

        stored = service.get_request(request.id)
        assert stored.patient_name == "Hanako Sato"
        assert stored.patient_birthday == "1990-04-01"
        assert stored.patient_age_at_request == 34


class TestCompletion:
    def test_draft_prefills_templates_per_type(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(types=["PANORAMA", "DENTAL"]), now=NOW)

        draft = service.begin_completion(request.id)

        assert draft.types == [ImagingType.PANORAMA, ImagingType.DENTAL]
        panorama = draft.logs[ImagingType.PANORAMA]
        assert (panorama.kv, panorama.ma, panorama.sec) == (70, 10, 12.0)
        dental = draft.logs[ImagingType.DENTAL]
        assert (dental.kv, dental.ma, dental.sec) == (60, 7, 0.10)

    def test_child_templates_for_young_patients(self):
        service, _, _ = _setup_service()
        request = service.create_request(
            _payload(patient_birthday="2015-01-01", patient_body_type="small", types=["CT"]), now=NOW
        )
        entry = service.begin_completion(request.id).logs[ImagingType.CT]
        assert (entry.kv, entry.ma, entry.sec) == (80, 4, 12.0)

    def test_operator_defaults_to_signed_in_staff(self):
        service, _, operators = _setup_service()
        operators.add_operator("Ito")
        request = service.create_request(_payload(), now=NOW)

        draft = service.begin_completion(request.id, ClinicIdentity(clinic_id="c-1", staff_name="Kato"))

        assert draft.operator_name == "Kato"

    def test_operator_falls_back_to_first_active_operator(self):
        service, _, operators = _setup_service()
        retired = operators.add_operator("Mori")
        operators.deactivate(retired.id)
        operators.add_operator("Ito")
        operators.add_operator("Ueda")
        request = service.create_request(_payload(), now=NOW)

        draft = service.begin_completion(request.id, ClinicIdentity())

        assert draft.operator_name == "Ito"

    def test_operator_empty_without_anyone_to_sign(self):
        service, _, _ = _setup_service(with_operators=False)
        request = service.create_request(_payload(), now=NOW)
        assert service.begin_completion(request.id).operator_name == ""

    def test_repeated_operator_edits_keep_one_log_per_type(self):
        service, _, _ = _setup_service()
        request = service.create_request(
            _payload(types=["PANORAMA", "BITEWING", "CT"], bitewing_sides=["left"]), now=NOW
        )
        draft = service.begin_completion(request.id)

        for name in ("Ito", "Ueda", "Kato"):
            draft.set_operator_name(name)
        draft.update_exposure("CT", kv=88)

        completed = service.finalize_completion(draft)

        assert completed.status is RequestStatus.COMPLETED
        assert len(completed.radiation_logs) == 3
        assert {entry.operator_name for entry in completed.radiation_logs.values()} == {"Kato"}
        assert completed.radiation_logs[ImagingType.CT].kv == 88
        assert completed.radiation_logs[ImagingType.CT].ma == 6

    def test_exposure_edit_for_foreign_type_is_rejected(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(), now=NOW)
        draft = service.begin_completion(request.id)

        with pytest.raises(ValueError):
            draft.update_exposure(ImagingType.CT, kv=90)
        with pytest.raises(ValidationError):
            draft.update_exposure(ImagingType.PANORAMA, sec=0)

    def test_incomplete_draft_is_not_written(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(types=["PANORAMA", "TMJ"]), now=NOW)
        draft = service.begin_completion(request.id)
        del draft.logs[ImagingType.TMJ]

        with pytest.raises(IncompleteRadiationLogError):
            service.finalize_completion(draft)

        stored = service.get_request(request.id)
        assert stored.status is RequestStatus.PENDING
        assert stored.radiation_logs == {}

    def test_completed_request_cannot_be_completed_again(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(), now=NOW)
        service.complete_request(request.id, operator_name="Ito")

        with pytest.raises(RequestStateError):
            service.begin_completion(request.id)
        with pytest.raises(RequestStateError):
            service.complete_request(request.id, operator_name="Ueda")

        assert service.get_request(request.id).radiation_logs[ImagingType.PANORAMA].operator_name == "Ito"

    def test_complete_request_applies_exposure_edits(self):
        service, _, _ = _setup_service()
        request = service.create_request(_payload(types=["CEPHALO"]), now=NOW)

        completed = service.complete_request(
            request.id,
            identity=ClinicIdentity(staff_name="Kato"),
            exposures={"CEPHALO": {"kv": 86, "sec": 0.6}},
        )

        entry = completed.radiation_logs[ImagingType.CEPHALO]
        assert (entry.kv, entry.ma, entry.sec) == (86, 12, 0.6)
        assert entry.operator_name == "Kato"

    def test_unknown_request(self):
        service, _, _ = _setup_service()
        with pytest.raises(RequestNotFoundError):
            service.begin_completion("missing")

    def test_pending_list_drops_completed(self):
        service, _, _ = _setup_service()
        first = service.create_request(_payload(), now=NOW)
        second = service.create_request(_payload(types=["DENTAL"]), now=NOW)
        service.complete_request(first.id)

        assert [r.id for r in service.list_pending()] == [second.id]
        assert [r.id for r in service.list_requests(RequestStatus.COMPLETED)] == [first.id]
