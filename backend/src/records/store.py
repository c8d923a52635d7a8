"""Record store: merge-upserts, deletes and change feeds over SQL tables."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Mapping, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db import session as db_session
from db.session import build_session_factory, session_scope

from . import repository
from .errors import RecordStoreError
from .feed import CollectionFeed, ErrorCallback
from .models import Base, ImagingRequestDTO, PatientDTO

logger = logging.getLogger(__name__)

PATIENTS = "patients"
REQUESTS = "requests"


class RecordStore:
    """Owns the patient and imaging request collections.

    Writes are merged into the stored row, committed, and then the affected
    collection is pushed to its subscribers in full.
    """

    def __init__(self, engine: Optional[Engine] = None) -> None:
        self._engine = engine
        self._session_factory = build_session_factory(engine) if engine is not None else None
        self._initialized = False
        self._feeds: dict[str, CollectionFeed] = {
            PATIENTS: CollectionFeed(PATIENTS, self.list_patients),
            REQUESTS: CollectionFeed(REQUESTS, self.list_requests),
        }

    @property
    def engine(self) -> Engine:
        return self._engine if self._engine is not None else db_session.engine

    def _ensure_initialized(self) -> None:
        if self._initialized:
            return
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            logger.exception("Failed to initialize record tables")
            raise RecordStoreError("initialize tables") from exc
        self._initialized = True

    @contextmanager
    def _session(self, action: str, *, publish: tuple[str, ...] = ()) -> Iterator[Session]:
        self._ensure_initialized()
        try:
            with session_scope(self._session_factory) as session:
                yield session
        except SQLAlchemyError as exc:
            logger.error("event=store_error action=%s message=%s", action, exc)
            raise RecordStoreError(action, f"Record store failed to {action}: {exc}") from exc
        for collection in publish:
            self._feeds[collection].publish()

    # ------------------------------------------------------------------
    # Change feeds
    # ------------------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        callback: Callable[[list[Any]], None],
        on_error: Optional[ErrorCallback] = None,
    ) -> Callable[[], None]:
        try:
            feed = self._feeds[collection]
        except KeyError:
            raise ValueError(f"Unknown collection: {collection}") from None
        return feed.subscribe(callback, on_error)

    # ------------------------------------------------------------------
    # Patients
    # ------------------------------------------------------------------

    def list_patients(self) -> list[PatientDTO]:
        with self._session("list patients") as session:
            return [PatientDTO.model_validate(p) for p in repository.list_patients(session)]

    def get_patient(self, patient_id: str) -> Optional[PatientDTO]:
        with self._session("read patient") as session:
            patient = repository.get_patient(session, patient_id)
            return PatientDTO.model_validate(patient) if patient else None

    def upsert_patient(self, patient_id: str, fields: Mapping[str, Any]) -> PatientDTO:
        with self._session("save patient", publish=(PATIENTS,)) as session:
            patient = repository.upsert_patient(session, patient_id, fields)
            dto = PatientDTO.model_validate(patient)
        logger.info("event=patient_saved patient_id=%s", patient_id)
        return dto

    def delete_patient(self, patient_id: str) -> bool:
        with self._session("delete patient", publish=(PATIENTS,)) as session:
            deleted = repository.delete_patient(session, patient_id)
        if deleted:
            logger.info("event=patient_deleted patient_id=%s", patient_id)
        return deleted

    # ------------------------------------------------------------------
    # Imaging requests
    # ------------------------------------------------------------------

    def list_requests(self) -> list[ImagingRequestDTO]:
        with self._session("list requests") as session:
            return [ImagingRequestDTO.model_validate(r) for r in repository.list_requests(session)]

    def get_request(self, request_id: str) -> Optional[ImagingRequestDTO]:
        with self._session("read request") as session:
            request = repository.get_request(session, request_id)
            return ImagingRequestDTO.model_validate(request) if request else None

    def upsert_request(self, request_id: str, fields: Mapping[str, Any]) -> ImagingRequestDTO:
        with self._session("save request", publish=(REQUESTS,)) as session:
            request = repository.upsert_request(session, request_id, fields)
            dto = ImagingRequestDTO.model_validate(request)
        return dto

    def create_request_with_patient(
        self,
        *,
        patient_id: str,
        patient_fields: Mapping[str, Any],
        request_id: str,
        request_fields: Mapping[str, Any],
    ) -> ImagingRequestDTO:
        """Upsert the patient and insert the request in a single transaction."""
        with self._session("create request", publish=(PATIENTS, REQUESTS)) as session:
            repository.upsert_patient(session, patient_id, patient_fields)
            if repository.get_request(session, request_id) is not None:
                raise ValueError(f"Request {request_id} already exists")
            request = repository.upsert_request(session, request_id, request_fields)
            dto = ImagingRequestDTO.model_validate(request)
        return dto
