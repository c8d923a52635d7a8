"""Pydantic schemas for imaging requests and their completion."""

from __future__ import annotations

from pydantic import BaseModel, Field

from exposure import AgeCategory, BitewingSide, BodyType, Gender, ImagingType
from exposure.catalog import DEFAULT_LOCATION_FROM, DEFAULT_LOCATION_TO
from records.models import RequestStatus
from scheduling.models import CreateRequestPayload

from .common import ExposureValues, RadiationLogResponse


class RequestResponse(BaseModel):
    id: str
    patientId: str
    patientName: str
    patientGender: Gender
    patientBirthday: str
    patientAgeAtRequest: int
    patientBodyType: BodyType
    types: list[ImagingType]
    selectedTeeth: list[int]
    bitewingSides: list[BitewingSide] | None = None
    notes: str
    points: int
    timestamp: str
    scheduledDate: str
    scheduledTime: str
    status: RequestStatus
    locationFrom: str
    locationTo: str
    radiationLogs: dict[ImagingType, RadiationLogResponse]


class RequestListResponse(BaseModel):
    items: list[RequestResponse]
    total: int


class CreateRequestBody(BaseModel):
    patientId: str = ""
    patientName: str = ""
    patientGender: Gender = Gender.MALE
    patientBirthday: str = ""
    patientBodyType: BodyType = BodyType.NORMAL
    types: list[ImagingType] = Field(default_factory=list)
    selectedTeeth: list[int] = Field(default_factory=list)
    bitewingSides: list[BitewingSide] = Field(default_factory=list)
    notes: str = ""
    scheduledDate: str | None = None
    scheduledTime: str | None = None
    locationFrom: str = DEFAULT_LOCATION_FROM
    locationTo: str = DEFAULT_LOCATION_TO

    def to_payload(self) -> CreateRequestPayload:
        return CreateRequestPayload(
            patient_id=self.patientId,
            patient_name=self.patientName,
            patient_gender=self.patientGender,
            patient_birthday=self.patientBirthday,
            patient_body_type=self.patientBodyType,
            types=self.types,
            selected_teeth=self.selectedTeeth,
            bitewing_sides=self.bitewingSides,
            notes=self.notes,
            scheduled_date=self.scheduledDate,
            scheduled_time=self.scheduledTime,
            location_from=self.locationFrom,
            location_to=self.locationTo,
        )


class CompletionDraftResponse(BaseModel):
    requestId: str
    operatorName: str
    logs: dict[ImagingType, RadiationLogResponse]


class ExposureEdit(BaseModel):
    kv: float | None = Field(default=None, gt=0)
    ma: float | None = Field(default=None, gt=0)
    sec: float | None = Field(default=None, gt=0)


class CompleteRequestBody(BaseModel):
    """Staff edits applied on top of the template defaults before completion."""
    operatorName: str | None = None
    logs: dict[ImagingType, ExposureEdit] = Field(default_factory=dict)


class QuoteBody(BaseModel):
    types: list[ImagingType] = Field(default_factory=list)
    bitewingSides: list[BitewingSide] = Field(default_factory=list)
    birthday: str = ""
    scheduledDate: str | None = None
    bodyType: BodyType = BodyType.NORMAL


class QuoteResponse(BaseModel):
    age: int
    ageCategory: AgeCategory
    points: int
    requiresToothSelection: bool
    exposures: dict[ImagingType, ExposureValues]
