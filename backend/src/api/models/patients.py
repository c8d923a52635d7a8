"""Pydantic schemas for patient records."""

from __future__ import annotations

from pydantic import BaseModel

from exposure import BodyType, Gender
from patients.service import UpdatePatientPayload

from .imaging import RequestResponse


class PatientResponse(BaseModel):
    id: str
    name: str
    gender: Gender
    birthday: str
    bodyType: BodyType
    age: int


class PatientListResponse(BaseModel):
    items: list[PatientResponse]
    loading: bool = False


class SavePatientPayload(BaseModel):
    """Fields to write; omitted fields keep their stored value."""
    name: str | None = None
    gender: Gender | None = None
    birthday: str | None = None
    bodyType: BodyType | None = None

    def to_update(self) -> UpdatePatientPayload:
        return UpdatePatientPayload(
            name=self.name,
            gender=self.gender,
            birthday=self.birthday,
            body_type=self.bodyType,
        )


class PatientHistoryResponse(BaseModel):
    patient: PatientResponse | None = None
    completed: list[RequestResponse]
    pending: list[RequestResponse]
