"""Patient lookups, edits and deletion."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import BaseModel, field_validator

from exposure import BodyType, Gender
from records.models import PatientDTO, validate_iso_date
from records.store import RecordStore

from .errors import DeletionNotConfirmedError, PatientNotFoundError

logger = logging.getLogger(__name__)


class UpdatePatientPayload(BaseModel):
    """Partial patient edit; fields left as None keep their stored value."""
    name: Optional[str] = None
    gender: Optional[Gender] = None
    birthday: Optional[str] = None
    body_type: Optional[BodyType] = None

    @field_validator("name")
    @classmethod
    def _trim_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("Patient name cannot be blank")
        return value

    @field_validator("birthday")
    @classmethod
    def _check_birthday(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else validate_iso_date(value)


class PatientService:
    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def list_patients(self) -> list[PatientDTO]:
        return self._store.list_patients()

    def get_patient(self, patient_id: str) -> Optional[PatientDTO]:
        return self._store.get_patient(patient_id.strip())

    def save_patient(self, patient_id: str, payload: UpdatePatientPayload) -> PatientDTO:
        """Upsert with merge semantics: only fields present in the payload are written."""
        patient_id = (patient_id or "").strip()
        if not patient_id:
            raise ValueError("Patient id cannot be blank")
        fields = payload.model_dump(exclude_none=True, mode="json")
        if self._store.get_patient(patient_id) is None:
            missing = [key for key in ("name", "birthday") if key not in fields]
            if missing:
                raise ValueError(f"New patients need: {', '.join(missing)}")
        return self._store.upsert_patient(patient_id, fields)

    def delete_patient(self, patient_id: str, *, confirmed: bool = False) -> None:
        """Remove the patient record; past requests keep their own snapshot."""
        if not confirmed:
            raise DeletionNotConfirmedError(patient_id)
        if not self._store.delete_patient(patient_id):
            raise PatientNotFoundError(patient_id)
