"""Pydantic schemas for the operator directory."""

from __future__ import annotations

from pydantic import BaseModel, model_validator

from operators.models import StaffRole


class OperatorResponse(BaseModel):
    id: int
    name: str
    role: StaffRole
    active: bool


class OperatorListResponse(BaseModel):
    items: list[OperatorResponse]


class CreateOperatorPayload(BaseModel):
    name: str
    role: StaffRole = StaffRole.TECHNICIAN
    active: bool = True

    @model_validator(mode="after")
    def _trim_name(self) -> "CreateOperatorPayload":
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Operator name is required")
        return self


class UpdateOperatorPayload(BaseModel):
    name: str | None = None
    role: StaffRole | None = None
    active: bool | None = None
