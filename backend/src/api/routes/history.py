"""History search and period statistics API routes."""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from exposure import IMAGING_LABELS, ImagingType
from stats import (
    HistoryFilter,
    PeriodPreset,
    compute_period_stats,
    filter_history,
    resolve_period,
)

from api.dependencies import Services, get_services
from api.models.stats import HistoryResponse, StatsResponse
from api.utils.serializers import serialize_requests

router = APIRouter(prefix="/api", tags=["history"])


@router.get("/history", response_model=HistoryResponse)
def search_history(
    q: str = Query("", description="Matches patient name or id, case-insensitive"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    imaging_type: Optional[ImagingType] = Query(None, alias="type"),
    services: Services = Depends(get_services),
):
    """Completed requests matching every given filter."""
    criteria = HistoryFilter(
        query=q.strip(),
        date_from=date_from.isoformat() if date_from else None,
        date_to=date_to.isoformat() if date_to else None,
        imaging_type=imaging_type,
    )
    items = filter_history(services.cache.requests, criteria)
    return {"items": serialize_requests(items), "total": len(items), "loading": services.cache.loading}


@router.get("/stats", response_model=StatsResponse)
def get_stats(
    preset: PeriodPreset = Query(PeriodPreset.TODAY),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    services: Services = Depends(get_services),
):
    """Counts, points and breakdowns for today, the last 7 days, this month or a custom range."""
    try:
        start, end = resolve_period(
            preset,
            date_from=date_from.isoformat() if date_from else None,
            date_to=date_to.isoformat() if date_to else None,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    attribution = services.stats_settings.operator_attribution
    result = compute_period_stats(services.cache.requests, start, end, attribution=attribution)
    return {
        "preset": preset,
        "start": result.start,
        "end": result.end,
        "totalPeriod": result.total_period,
        "totalCount": result.total_count,
        "totalPoints": result.total_points,
        "averagePoints": result.average_points,
        "pendingCount": result.pending_count,
        "byType": [
            {"type": imaging_type, "label": IMAGING_LABELS[imaging_type], "count": count}
            for imaging_type, count in result.by_type.items()
        ],
        "byOperator": [{"name": name, "count": count} for name, count in result.by_operator],
        "attribution": attribution,
        "loading": services.cache.loading,
    }
