"""Payloads and working state for the request lifecycle."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from exposure import BitewingSide, BodyType, Gender, ImagingType
from exposure.catalog import DEFAULT_LOCATION_FROM, DEFAULT_LOCATION_TO
from records.models import RadiationLogEntry


class ClinicIdentity(BaseModel):
    """Who is using the session. Not verified; only used to sign logs."""
    clinic_id: str = ""
    staff_name: str = ""


class CreateRequestPayload(BaseModel):
    """Form state for a new imaging request."""
    patient_id: str = ""
    patient_name: str = ""
    patient_gender: Gender = Gender.MALE
    patient_birthday: str = ""
    patient_body_type: BodyType = BodyType.NORMAL
    types: list[ImagingType] = Field(default_factory=list)
    selected_teeth: list[int] = Field(default_factory=list)
    bitewing_sides: list[BitewingSide] = Field(default_factory=list)
    notes: str = ""
    scheduled_date: Optional[str] = None
    scheduled_time: Optional[str] = None
    location_from: str = DEFAULT_LOCATION_FROM
    location_to: str = DEFAULT_LOCATION_TO


class CompletionDraft(BaseModel):
    """Editable radiation logs for a request that is being completed.

    Holds one entry per imaging type of the request. Entries can be edited
    but never added or removed.
    """
    request_id: str
    types: list[ImagingType]
    logs: dict[ImagingType, RadiationLogEntry]

    @property
    def operator_name(self) -> str:
        if not self.types:
            return ""
        return self.logs[self.types[0]].operator_name

    def set_operator_name(self, name: str) -> None:
        """Sign every entry: one staff member performs the whole session."""
        for imaging_type, entry in self.logs.items():
            self.logs[imaging_type] = entry.model_copy(update={"operator_name": name})

    def update_exposure(
        self,
        imaging_type: ImagingType | str,
        *,
        kv: Optional[float] = None,
        ma: Optional[float] = None,
        sec: Optional[float] = None,
    ) -> RadiationLogEntry:
        imaging_type = ImagingType(imaging_type)
        if imaging_type not in self.logs:
            raise ValueError(f"{imaging_type.value} is not part of request {self.request_id}")
        values = self.logs[imaging_type].model_dump()
        for key, value in (("kv", kv), ("ma", ma), ("sec", sec)):
            if value is not None:
                values[key] = value
        entry = RadiationLogEntry.model_validate(values)
        self.logs[imaging_type] = entry
        return entry
