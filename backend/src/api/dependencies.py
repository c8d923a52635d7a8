"""Shared service wiring and request dependencies for the API routes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Header, Request

from operators.service import OperatorDirectory
from patients.service import PatientService
from records.cache import RecordCache
from records.store import RecordStore
from scheduling.models import ClinicIdentity
from scheduling.service import RequestService
from stats import StatsSettings, get_stats_settings


@dataclass
class Services:
    store: RecordStore
    cache: RecordCache
    operators: OperatorDirectory
    patients: PatientService
    requests: RequestService
    stats_settings: StatsSettings


def build_services(
    store: Optional[RecordStore] = None,
    operators: Optional[OperatorDirectory] = None,
    stats_settings: Optional[StatsSettings] = None,
) -> Services:
    store = store or RecordStore()
    operators = operators or OperatorDirectory()
    return Services(
        store=store,
        cache=RecordCache(store),
        operators=operators,
        patients=PatientService(store),
        requests=RequestService(store, operators),
        stats_settings=stats_settings or get_stats_settings(),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_identity(
    x_clinic_id: Optional[str] = Header(default=None),
    x_staff_name: Optional[str] = Header(default=None),
) -> Optional[ClinicIdentity]:
    """Session identity from the X-Clinic-Id / X-Staff-Name headers, if sent."""
    if not x_clinic_id and not x_staff_name:
        return None
    return ClinicIdentity(clinic_id=x_clinic_id or "", staff_name=x_staff_name or "")
