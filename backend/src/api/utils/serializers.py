"""Serialization utilities for API responses."""
from __future__ import annotations

import datetime as dt
from typing import Optional

from exposure import age_at
from records.models import ImagingRequestDTO, PatientDTO, RadiationLogEntry
from scheduling.models import CompletionDraft


def isoformat(value: dt.datetime | None) -> str | None:
    """Convert datetime to ISO format string.

    Args:
        value: Datetime to convert

    Returns:
        ISO format string or None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc).isoformat()
    return value.isoformat()


def serialize_log(entry: RadiationLogEntry) -> dict:
    return {
        "kv": entry.kv,
        "ma": entry.ma,
        "sec": entry.sec,
        "operatorName": entry.operator_name,
    }


def serialize_request(request: ImagingRequestDTO) -> dict:
    """Serialize an imaging request to the camelCase API shape."""
    return {
        "id": request.id,
        "patientId": request.patient_id,
        "patientName": request.patient_name,
        "patientGender": request.patient_gender.value,
        "patientBirthday": request.patient_birthday,
        "patientAgeAtRequest": request.patient_age_at_request,
        "patientBodyType": request.patient_body_type.value,
        "types": [t.value for t in request.types],
        "selectedTeeth": list(request.selected_teeth),
        "bitewingSides": (
            [s.value for s in request.bitewing_sides] if request.bitewing_sides is not None else None
        ),
        "notes": request.notes,
        "points": request.points,
        "timestamp": isoformat(request.timestamp),
        "scheduledDate": request.scheduled_date,
        "scheduledTime": request.scheduled_time,
        "status": request.status.value,
        "locationFrom": request.location_from,
        "locationTo": request.location_to,
        "radiationLogs": {t.value: serialize_log(log) for t, log in request.radiation_logs.items()},
    }


def serialize_requests(requests: list[ImagingRequestDTO]) -> list[dict]:
    return [serialize_request(r) for r in requests]


def serialize_patient(patient: PatientDTO, *, today: Optional[dt.date] = None) -> dict:
    return {
        "id": patient.id,
        "name": patient.name,
        "gender": patient.gender.value,
        "birthday": patient.birthday,
        "bodyType": patient.body_type.value,
        "age": age_at(patient.birthday, today),
    }


def serialize_draft(draft: CompletionDraft) -> dict:
    return {
        "requestId": draft.request_id,
        "operatorName": draft.operator_name,
        "logs": {t.value: serialize_log(draft.logs[t]) for t in draft.types},
    }
