"""Imaging request lifecycle API routes."""
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from records.models import RequestStatus
from scheduling.errors import (
    IncompleteRadiationLogError,
    RequestNotFoundError,
    RequestStateError,
    RequestValidationError,
)
from scheduling.models import ClinicIdentity

from api.dependencies import Services, get_identity, get_services
from api.models.common import ValidationErrorDetail, ValidationErrorResponse
from api.models.imaging import (
    CompleteRequestBody,
    CompletionDraftResponse,
    CreateRequestBody,
    RequestListResponse,
    RequestResponse,
)
from api.utils.serializers import serialize_draft, serialize_request, serialize_requests

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/requests", tags=["requests"])


@router.get("", response_model=RequestListResponse)
def list_requests(
    status: Optional[RequestStatus] = Query(None),
    services: Services = Depends(get_services),
):
    """List requests, newest first. ``status=pending`` gives the task list."""
    requests = services.cache.requests
    if status is not None:
        requests = [r for r in requests if r.status == status]
    return {"items": serialize_requests(requests), "total": len(requests)}


@router.post(
    "",
    response_model=RequestResponse,
    status_code=201,
    responses={400: {"model": ValidationErrorResponse}},
)
def create_request(payload: CreateRequestBody, services: Services = Depends(get_services)):
    """Create a pending request and upsert the patient it names."""
    try:
        request = services.requests.create_request(payload.to_payload())
    except RequestValidationError as exc:
        raise HTTPException(
            status_code=400,
            detail=ValidationErrorDetail(reason=exc.reason.value, message=exc.message).model_dump(),
        ) from exc
    return serialize_request(request)


@router.get("/{request_id}", response_model=RequestResponse)
def get_request(request_id: str, services: Services = Depends(get_services)):
    try:
        return serialize_request(services.requests.get_request(request_id))
    except RequestNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Request not found") from exc


@router.get("/{request_id}/completion-draft", response_model=CompletionDraftResponse)
def get_completion_draft(
    request_id: str,
    services: Services = Depends(get_services),
    identity: Optional[ClinicIdentity] = Depends(get_identity),
):
    """Radiation logs prefilled from the exposure templates, not yet saved."""
    try:
        draft = services.requests.begin_completion(request_id, identity)
    except RequestNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Request not found") from exc
    except RequestStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return serialize_draft(draft)


@router.post("/{request_id}/complete", response_model=RequestResponse)
def complete_request(
    request_id: str,
    payload: CompleteRequestBody,
    services: Services = Depends(get_services),
    identity: Optional[ClinicIdentity] = Depends(get_identity),
):
    """Record the radiation logs and mark the request completed."""
    exposures = {
        imaging_type: edit.model_dump(exclude_none=True)
        for imaging_type, edit in payload.logs.items()
    }
    try:
        request = services.requests.complete_request(
            request_id,
            identity=identity,
            exposures=exposures,
            operator_name=payload.operatorName,
        )
    except RequestNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Request not found") from exc
    except RequestStateError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except (IncompleteRadiationLogError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return serialize_request(request)
