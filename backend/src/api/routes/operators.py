"""Operator directory API routes."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from operators.service import OperatorNotFoundError

from api.dependencies import Services, get_services
from api.models.operators import (
    CreateOperatorPayload,
    OperatorListResponse,
    OperatorResponse,
    UpdateOperatorPayload,
)

router = APIRouter(prefix="/api/operators", tags=["operators"])


@router.get("", response_model=OperatorListResponse)
def list_operators(
    active_only: bool = Query(False, alias="activeOnly"),
    services: Services = Depends(get_services),
):
    """List staff in registration order."""
    operators = services.operators.list_operators(active_only=active_only)
    return {"items": [o.model_dump() for o in operators]}


@router.post("", response_model=OperatorResponse, status_code=status.HTTP_201_CREATED)
def create_operator(payload: CreateOperatorPayload, services: Services = Depends(get_services)):
    try:
        operator = services.operators.add_operator(payload.name, payload.role, active=payload.active)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return operator.model_dump()


@router.put("/{operator_id}", response_model=OperatorResponse)
def update_operator(operator_id: int, payload: UpdateOperatorPayload, services: Services = Depends(get_services)):
    try:
        operator = services.operators.update_operator(
            operator_id,
            name=payload.name,
            role=payload.role,
            active=payload.active,
        )
    except OperatorNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Operator not found") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return operator.model_dump()


@router.delete("/{operator_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_operator(operator_id: int, services: Services = Depends(get_services)):
    try:
        services.operators.remove_operator(operator_id)
    except OperatorNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Operator not found") from exc
