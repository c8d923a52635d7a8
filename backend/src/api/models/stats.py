"""Pydantic schemas for history and statistics views."""

from __future__ import annotations

from pydantic import BaseModel

from exposure import ImagingType
from stats import OperatorAttribution, PeriodPreset

from .imaging import RequestResponse


class HistoryResponse(BaseModel):
    items: list[RequestResponse]
    total: int
    loading: bool = False


class TypeCount(BaseModel):
    type: ImagingType
    label: str
    count: int


class OperatorCount(BaseModel):
    name: str
    count: int


class StatsResponse(BaseModel):
    preset: PeriodPreset
    start: str
    end: str
    totalPeriod: int
    totalCount: int
    totalPoints: int
    averagePoints: int
    pendingCount: int
    byType: list[TypeCount]
    byOperator: list[OperatorCount]
    attribution: OperatorAttribution
    loading: bool = False
