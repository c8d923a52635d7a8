"""Pydantic schemas for catalogue reference data."""

from __future__ import annotations

from pydantic import BaseModel

from exposure import BodyType, Gender, ImagingType


class ImagingTypeInfo(BaseModel):
    type: ImagingType
    label: str
    basePoints: int
    toothBased: bool


class BodyTypeInfo(BaseModel):
    value: BodyType
    label: str


class ReferenceResponse(BaseModel):
    imagingTypes: list[ImagingTypeInfo]
    bodyTypes: list[BodyTypeInfo]
    genders: list[Gender]
    childAgeLimit: int
    locations: list[str]
    defaultLocationFrom: str
    defaultLocationTo: str
    quadrants: dict[int, list[int]]
    premolarMolarRanges: dict[int, list[int]]
