"""SQLAlchemy models and DTOs for patients and imaging requests."""

from __future__ import annotations

import enum
import re
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from exposure import BitewingSide, BodyType, Gender, ImagingType

ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class RequestStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PatientRecord(Base):
    __tablename__ = "patients"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False, default=Gender.MALE.value)
    birthday: Mapped[str] = mapped_column(String(10), nullable=False)
    body_type: Mapped[str] = mapped_column(String(16), nullable=False, default=BodyType.NORMAL.value)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class ImagingRequestRecord(Base):
    __tablename__ = "imaging_requests"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    # Patient snapshot at request time; no foreign key to patients.
    patient_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    patient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    patient_gender: Mapped[str] = mapped_column(String(16), nullable=False)
    patient_birthday: Mapped[str] = mapped_column(String(10), nullable=False)
    patient_age_at_request: Mapped[int] = mapped_column(Integer, nullable=False)
    patient_body_type: Mapped[str] = mapped_column(String(16), nullable=False)
    types: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    selected_teeth: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    bitewing_sides: Mapped[Optional[list]] = mapped_column(JSON, nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    scheduled_date: Mapped[str] = mapped_column(String(10), nullable=False, index=True)
    scheduled_time: Mapped[str] = mapped_column(String(5), nullable=False, default="")
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=RequestStatus.PENDING.value, index=True)
    location_from: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    location_to: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    # imaging type -> {kv, ma, sec, operator_name}, in the order of ``types``
    radiation_logs: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)


def validate_iso_date(value: str) -> str:
    value = (value or "").strip()
    if not ISO_DATE_PATTERN.match(value):
        raise ValueError("Dates must use the YYYY-MM-DD format")
    # rejects impossible dates such as 2024-02-30
    datetime.strptime(value, "%Y-%m-%d")
    return value


class PatientDTO(BaseModel):
    """Patient as currently stored."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    gender: Gender = Gender.MALE
    birthday: str
    body_type: BodyType = BodyType.NORMAL


class RadiationLogEntry(BaseModel):
    """Exposure actually used for one imaging type, plus who took it."""

    kv: float = Field(gt=0)
    ma: float = Field(gt=0)
    sec: float = Field(gt=0)
    operator_name: str = ""


class ImagingRequestDTO(BaseModel):
    """Data transfer object for imaging requests."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    patient_name: str
    patient_gender: Gender
    patient_birthday: str
    patient_age_at_request: int
    patient_body_type: BodyType
    types: list[ImagingType]
    selected_teeth: list[int] = []
    bitewing_sides: Optional[list[BitewingSide]] = None
    notes: str = ""
    points: int = 0
    timestamp: datetime
    scheduled_date: str
    scheduled_time: str = ""
    status: RequestStatus = RequestStatus.PENDING
    location_from: str = ""
    location_to: str = ""
    radiation_logs: dict[ImagingType, RadiationLogEntry] = {}

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # SQLite hands back naive datetimes
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
