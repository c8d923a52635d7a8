"""Common Pydantic schemas shared across routes."""

from __future__ import annotations

from pydantic import BaseModel


class ValidationErrorDetail(BaseModel):
    """Body of ``detail`` for rejected requests."""
    reason: str
    message: str


class ExposureValues(BaseModel):
    kv: float
    ma: float
    sec: float


class RadiationLogResponse(ExposureValues):
    operatorName: str = ""


class ValidationErrorResponse(BaseModel):
    detail: ValidationErrorDetail
