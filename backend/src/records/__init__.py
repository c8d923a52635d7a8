"""Persistence for patients and imaging requests with change feeds."""

from .errors import RecordStoreError, SubscriptionError
from .models import ImagingRequestDTO, PatientDTO, RadiationLogEntry, RequestStatus
from .store import PATIENTS, REQUESTS, RecordStore

__all__ = [
    "ImagingRequestDTO",
    "PATIENTS",
    "PatientDTO",
    "REQUESTS",
    "RadiationLogEntry",
    "RecordStore",
    "RecordStoreError",
    "RequestStatus",
    "SubscriptionError",
]
