"""Read-only history and statistics views over imaging requests."""

from .config import OperatorAttribution, StatsSettings, get_stats_settings
from .history import HistoryFilter, filter_history, patient_requests
from .periods import (
    UNSPECIFIED_OPERATOR,
    PeriodPreset,
    PeriodStats,
    compute_period_stats,
    resolve_period,
)

__all__ = [
    "HistoryFilter",
    "OperatorAttribution",
    "PeriodPreset",
    "PeriodStats",
    "StatsSettings",
    "UNSPECIFIED_OPERATOR",
    "compute_period_stats",
    "filter_history",
    "get_stats_settings",
    "patient_requests",
    "resolve_period",
]
