"""Data access helpers for patient and imaging request persistence."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from .models import ImagingRequestRecord, PatientRecord

PATIENT_FIELDS = frozenset({"name", "gender", "birthday", "body_type"})
REQUEST_FIELDS = frozenset(
    column.key for column in ImagingRequestRecord.__table__.columns if column.key != "id"
)


def _merge(record: Any, fields: Mapping[str, Any], allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        raise ValueError(f"Unknown fields: {', '.join(sorted(unknown))}")
    for key, value in fields.items():
        setattr(record, key, value)


def get_patient(session: Session, patient_id: str) -> Optional[PatientRecord]:
    return session.get(PatientRecord, patient_id)


def list_patients(session: Session) -> list[PatientRecord]:
    stmt = select(PatientRecord).order_by(PatientRecord.name, PatientRecord.id)
    return list(session.scalars(stmt))


def upsert_patient(session: Session, patient_id: str, fields: Mapping[str, Any]) -> PatientRecord:
    """Create the patient or overwrite only the given fields of the stored one."""
    patient = session.get(PatientRecord, patient_id)
    if patient is None:
        patient = PatientRecord(id=patient_id)
        session.add(patient)
    _merge(patient, fields, PATIENT_FIELDS)
    session.flush()
    return patient


def delete_patient(session: Session, patient_id: str) -> bool:
    patient = session.get(PatientRecord, patient_id)
    if patient is None:
        return False
    session.delete(patient)
    session.flush()
    return True


def get_request(session: Session, request_id: str) -> Optional[ImagingRequestRecord]:
    return session.get(ImagingRequestRecord, request_id)


def list_requests(session: Session) -> list[ImagingRequestRecord]:
    stmt = select(ImagingRequestRecord).order_by(
        ImagingRequestRecord.timestamp.desc(), ImagingRequestRecord.id
    )
    return list(session.scalars(stmt))


def upsert_request(session: Session, request_id: str, fields: Mapping[str, Any]) -> ImagingRequestRecord:
    request = session.get(ImagingRequestRecord, request_id)
    if request is None:
        request = ImagingRequestRecord(id=request_id)
        session.add(request)
    _merge(request, fields, REQUEST_FIELDS)
    session.flush()
    return request
