"""Aggregate statistics over a date range of imaging requests."""

from __future__ import annotations

import enum
import math
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Optional

from exposure import ImagingType
from records.models import ImagingRequestDTO, RequestStatus

from .config import OperatorAttribution

UNSPECIFIED_OPERATOR = "Unspecified"


class PeriodPreset(str, enum.Enum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


@dataclass
class PeriodStats:
    start: str
    end: str
    total_period: int = 0
    total_count: int = 0
    total_points: int = 0
    average_points: int = 0
    pending_count: int = 0
    by_type: dict[ImagingType, int] = field(default_factory=dict)
    by_operator: list[tuple[str, int]] = field(default_factory=list)


def resolve_period(
    preset: PeriodPreset | str,
    *,
    today: Optional[date] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
) -> tuple[str, str]:
    """Inclusive (start, end) ISO dates for a preset.

    ``week`` is the trailing seven days including today and ``month`` runs
    from the first of the current month to today.
    """
    preset = PeriodPreset(preset)
    today = today or date.today()
    if preset is PeriodPreset.TODAY:
        start = end = today
    elif preset is PeriodPreset.WEEK:
        start, end = today - timedelta(days=6), today
    elif preset is PeriodPreset.MONTH:
        start, end = today.replace(day=1), today
    else:
        if not date_from or not date_to:
            raise ValueError("A custom period needs both a start and an end date")
        if date_from > date_to:
            raise ValueError("The period start must not be after its end")
        return date_from, date_to
    return start.isoformat(), end.isoformat()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _operators_for(request: ImagingRequestDTO, attribution: OperatorAttribution) -> list[str]:
    logs = list(request.radiation_logs.values())
    if not logs:
        return [UNSPECIFIED_OPERATOR]
    if attribution is OperatorAttribution.PER_TYPE:
        names = dict.fromkeys(log.operator_name or UNSPECIFIED_OPERATOR for log in logs)
        return list(names)
    return [logs[0].operator_name or UNSPECIFIED_OPERATOR]


def compute_period_stats(
    requests: Iterable[ImagingRequestDTO],
    start: str,
    end: str,
    *,
    attribution: OperatorAttribution = OperatorAttribution.FIRST_LOG,
) -> PeriodStats:
    in_range = [r for r in requests if start <= r.scheduled_date <= end]
    completed = [r for r in in_range if r.status == RequestStatus.COMPLETED]
    pending = [r for r in in_range if r.status == RequestStatus.PENDING]

    total_points = sum(r.points for r in completed)
    by_type = {imaging_type: 0 for imaging_type in ImagingType}
    operators: Counter[str] = Counter()
    for request in completed:
        # a request counts once in each of its type buckets
        for imaging_type in dict.fromkeys(request.types):
            by_type[imaging_type] += 1
        operators.update(_operators_for(request, attribution))

    return PeriodStats(
        start=start,
        end=end,
        total_period=len(in_range),
        total_count=len(completed),
        total_points=total_points,
        average_points=_round_half_up(total_points / len(completed)) if completed else 0,
        pending_count=len(pending),
        by_type=by_type,
        by_operator=sorted(operators.items(), key=lambda item: (-item[1], item[0])),
    )
