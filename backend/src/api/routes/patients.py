"""Patient record API routes."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from patients.errors import DeletionNotConfirmedError, PatientNotFoundError
from records.models import RequestStatus
from stats import patient_requests

from api.dependencies import Services, get_services
from api.models.patients import (
    PatientHistoryResponse,
    PatientListResponse,
    PatientResponse,
    SavePatientPayload,
)
from api.utils.serializers import serialize_patient, serialize_requests

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/patients", tags=["patients"])


@router.get("", response_model=PatientListResponse)
def list_patients(services: Services = Depends(get_services)):
    """List patients ordered by name."""
    cache = services.cache
    return {"items": [serialize_patient(p) for p in cache.patients], "loading": cache.loading}


@router.get("/{patient_id}", response_model=PatientResponse)
def get_patient(patient_id: str, services: Services = Depends(get_services)):
    """Look up a patient by id, as the request form does when an id is typed."""
    patient = services.patients.get_patient(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return serialize_patient(patient)


@router.put("/{patient_id}", response_model=PatientResponse)
def save_patient(patient_id: str, payload: SavePatientPayload, services: Services = Depends(get_services)):
    """Create or edit a patient; omitted fields are left unchanged."""
    try:
        update = payload.to_update()
        patient = services.patients.save_patient(patient_id, update)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return serialize_patient(patient)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_patient(
    patient_id: str,
    confirm: bool = Query(False, description="Must be true; deletion cannot be undone"),
    services: Services = Depends(get_services),
):
    """Delete a patient record. Imaging requests for the patient are kept."""
    try:
        services.patients.delete_patient(patient_id, confirmed=confirm)
    except DeletionNotConfirmedError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except PatientNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Patient not found") from exc


@router.get("/{patient_id}/history", response_model=PatientHistoryResponse)
def get_patient_history(patient_id: str, services: Services = Depends(get_services)):
    """Completed and upcoming requests for one patient id."""
    cache = services.cache
    patient = cache.find_patient(patient_id)
    completed = patient_requests(cache.requests, patient_id, RequestStatus.COMPLETED)
    pending = patient_requests(cache.requests, patient_id, RequestStatus.PENDING)
    if patient is None and not completed and not pending:
        raise HTTPException(status_code=404, detail="Patient not found")
    return {
        "patient": serialize_patient(patient) if patient else None,
        "completed": serialize_requests(completed),
        "pending": serialize_requests(pending),
    }
