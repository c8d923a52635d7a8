"""In-process read cache kept current by the record store's change feeds."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from .errors import SubscriptionError
from .models import ImagingRequestDTO, PatientDTO
from .store import PATIENTS, REQUESTS, RecordStore

logger = logging.getLogger(__name__)


class RecordCache:
    """Latest patient and request snapshots pushed by the store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._unsubscribe: list[Callable[[], None]] = []
        self.patients: list[PatientDTO] = []
        self.requests: list[ImagingRequestDTO] = []
        self.loading = True
        self.last_error: Optional[str] = None

    def start(self) -> None:
        if self._unsubscribe:
            return
        self._unsubscribe = [
            self._store.subscribe(PATIENTS, self._on_patients, self._on_error),
            self._store.subscribe(REQUESTS, self._on_requests, self._on_error),
        ]

    def stop(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

    def find_patient(self, patient_id: str) -> Optional[PatientDTO]:
        return next((p for p in self.patients if p.id == patient_id), None)

    def _on_patients(self, snapshot: list[PatientDTO]) -> None:
        self.patients = snapshot

    def _on_requests(self, snapshot: list[ImagingRequestDTO]) -> None:
        self.requests = snapshot
        self.loading = False
        self.last_error = None

    def _on_error(self, error: SubscriptionError) -> None:
        # Never leave readers waiting on a feed that failed.
        self.loading = False
        self.last_error = str(error)
        logger.warning("event=cache_feed_error collection=%s message=%s", error.collection, error)
