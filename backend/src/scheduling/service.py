"""Request lifecycle service orchestrating validation, pricing and persistence."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from exposure import (
    ImagingType,
    age_at,
    age_category,
    calculate_points,
    lookup_exposure,
)
from operators.service import OperatorDirectory
from records.models import ImagingRequestDTO, RadiationLogEntry, RequestStatus
from records.store import RecordStore

from .errors import IncompleteRadiationLogError, RequestNotFoundError, RequestStateError
from .models import ClinicIdentity, CompletionDraft, CreateRequestPayload
from .validation import validate_new_request

logger = logging.getLogger(__name__)


def _log_request_event(event: str, request: ImagingRequestDTO, **extra: Any) -> None:
    parts = [
        f"event={event}",
        f"request_id={request.id}",
        f"patient_id={request.patient_id}",
        f"status={request.status.value}",
        f"types={','.join(t.value for t in request.types)}",
    ]
    for key, value in extra.items():
        if value is not None:
            parts.append(f"{key}={value}")
    logger.info(" ".join(parts))


def _new_request_id() -> str:
    return uuid.uuid4().hex


class RequestService:
    """Moves imaging requests from pending to completed.

    The transition is one way: a completed request is never reopened.
    """

    def __init__(self, store: RecordStore, operators: Optional[OperatorDirectory] = None) -> None:
        self._store = store
        self._operators = operators

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_request(self, request_id: str) -> ImagingRequestDTO:
        request = self._store.get_request(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    def list_requests(self, status: Optional[RequestStatus] = None) -> list[ImagingRequestDTO]:
        requests = self._store.list_requests()
        if status is None:
            return requests
        return [r for r in requests if r.status == status]

    def list_pending(self) -> list[ImagingRequestDTO]:
        return self.list_requests(RequestStatus.PENDING)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_request(self, payload: CreateRequestPayload, *, now: Optional[datetime] = None) -> ImagingRequestDTO:
        now = now or datetime.now().astimezone()
        validate_new_request(payload, today=now.date())

        scheduled_date = (payload.scheduled_date or now.date().isoformat()).strip()
        scheduled_time = (payload.scheduled_time or now.strftime("%H:%M")).strip()
        types = list(dict.fromkeys(payload.types))
        bitewing_selected = ImagingType.BITEWING in types
        sides = list(dict.fromkeys(payload.bitewing_sides)) if bitewing_selected else []

        patient_id = payload.patient_id.strip()
        patient_fields = {
            "name": payload.patient_name.strip(),
            "gender": payload.patient_gender.value,
            "birthday": payload.patient_birthday.strip(),
            "body_type": payload.patient_body_type.value,
        }
        request_fields = {
            "patient_id": patient_id,
            "patient_name": patient_fields["name"],
            "patient_gender": patient_fields["gender"],
            "patient_birthday": patient_fields["birthday"],
            # frozen at creation, never recomputed from the live birthday
            "patient_age_at_request": age_at(patient_fields["birthday"], scheduled_date),
            "patient_body_type": patient_fields["body_type"],
            "types": [t.value for t in types],
            "selected_teeth": sorted(set(payload.selected_teeth)),
            "bitewing_sides": [s.value for s in sides] if bitewing_selected else None,
            "notes": payload.notes,
            "points": calculate_points(types, sides),
            "timestamp": now.astimezone(timezone.utc),
            "scheduled_date": scheduled_date,
            "scheduled_time": scheduled_time,
            "status": RequestStatus.PENDING.value,
            "location_from": payload.location_from,
            "location_to": payload.location_to,
            "radiation_logs": {},
        }

        request = self._store.create_request_with_patient(
            patient_id=patient_id,
            patient_fields=patient_fields,
            request_id=_new_request_id(),
            request_fields=request_fields,
        )
        _log_request_event("created", request, points=request.points, scheduled=request.scheduled_date)
        return request

    # ------------------------------------------------------------------
    # Completion
    # ------------------------------------------------------------------

    def _pending_request(self, request_id: str) -> ImagingRequestDTO:
        request = self.get_request(request_id)
        if request.status != RequestStatus.PENDING:
            raise RequestStateError(f"Request {request_id} is already {request.status.value}")
        return request

    def _default_operator_name(self, identity: Optional[ClinicIdentity]) -> str:
        if identity is not None and identity.staff_name.strip():
            return identity.staff_name.strip()
        if self._operators is not None:
            return self._operators.first_active_name() or ""
        return ""

    def begin_completion(self, request_id: str, identity: Optional[ClinicIdentity] = None) -> CompletionDraft:
        """Prefill one log per imaging type from the exposure templates."""
        request = self._pending_request(request_id)
        category = age_category(request.patient_age_at_request)
        operator_name = self._default_operator_name(identity)

        logs: dict[ImagingType, RadiationLogEntry] = {}
        for imaging_type in request.types:
            settings = lookup_exposure(imaging_type, category, request.patient_body_type)
            logs[imaging_type] = RadiationLogEntry(**settings.as_dict(), operator_name=operator_name)
        return CompletionDraft(request_id=request.id, types=list(request.types), logs=logs)

    def finalize_completion(self, draft: CompletionDraft) -> ImagingRequestDTO:
        """Persist the draft logs and mark the request completed, all or nothing."""
        request = self._pending_request(draft.request_id)
        expected = set(request.types)
        provided = set(draft.logs)
        if provided != expected:
            missing = sorted(t.value for t in expected - provided)
            extra = sorted(t.value for t in provided - expected)
            raise IncompleteRadiationLogError(
                f"Request {request.id} needs one log per imaging type"
                + (f"; missing {', '.join(missing)}" if missing else "")
                + (f"; unexpected {', '.join(extra)}" if extra else "")
            )

        radiation_logs = {t.value: draft.logs[t].model_dump(mode="json") for t in request.types}
        completed = self._store.upsert_request(
            request.id,
            {"status": RequestStatus.COMPLETED.value, "radiation_logs": radiation_logs},
        )
        _log_request_event("completed", completed, operator=draft.operator_name or None)
        return completed

    def complete_request(
        self,
        request_id: str,
        *,
        identity: Optional[ClinicIdentity] = None,
        exposures: Optional[Mapping[ImagingType | str, Mapping[str, float]]] = None,
        operator_name: Optional[str] = None,
    ) -> ImagingRequestDTO:
        """Prefill, apply staff edits and finalize in one call."""
        draft = self.begin_completion(request_id, identity)
        for imaging_type, values in (exposures or {}).items():
            draft.update_exposure(imaging_type, **values)
        if operator_name is not None:
            draft.set_operator_name(operator_name)
        return self.finalize_completion(draft)
