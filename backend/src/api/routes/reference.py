"""Catalogue reference data, exposure defaults and point quotes."""
from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query

from exposure import (
    AgeCategory,
    BodyType,
    CHILD_AGE_LIMIT,
    Gender,
    ImagingType,
    INSURANCE_POINTS,
    IMAGING_LABELS,
    age_at,
    age_category,
    calculate_points,
    lookup_exposure,
    requires_tooth_selection,
)
from exposure.catalog import (
    BODY_TYPE_LABELS,
    DEFAULT_LOCATION_FROM,
    DEFAULT_LOCATION_TO,
    LOCATION_OPTIONS,
)
from exposure.teeth import PREMOLAR_MOLAR_RANGES, QUADRANTS, TOOTH_BASED_TYPES
from records.models import validate_iso_date

from api.models.common import ExposureValues
from api.models.imaging import QuoteBody, QuoteResponse
from api.models.reference import ReferenceResponse

router = APIRouter(prefix="/api", tags=["reference"])


@router.get("/reference", response_model=ReferenceResponse)
def get_reference():
    """Imaging types, body types, locations and tooth chart layout."""
    return {
        "imagingTypes": [
            {
                "type": imaging_type,
                "label": IMAGING_LABELS[imaging_type],
                "basePoints": INSURANCE_POINTS[imaging_type],
                "toothBased": imaging_type in TOOTH_BASED_TYPES,
            }
            for imaging_type in ImagingType
        ],
        "bodyTypes": [{"value": body_type, "label": BODY_TYPE_LABELS[body_type]} for body_type in BodyType],
        "genders": list(Gender),
        "childAgeLimit": CHILD_AGE_LIMIT,
        "locations": LOCATION_OPTIONS,
        "defaultLocationFrom": DEFAULT_LOCATION_FROM,
        "defaultLocationTo": DEFAULT_LOCATION_TO,
        "quadrants": QUADRANTS,
        "premolarMolarRanges": PREMOLAR_MOLAR_RANGES,
    }


@router.get("/reference/exposure", response_model=ExposureValues)
def get_exposure(
    imaging_type: ImagingType = Query(..., alias="type"),
    category: AgeCategory = Query(..., alias="ageCategory"),
    body_type: BodyType = Query(BodyType.NORMAL, alias="bodyType"),
):
    """Default exposure for one imaging type and patient profile."""
    return lookup_exposure(imaging_type, category, body_type).as_dict()


@router.post("/quote", response_model=QuoteResponse)
def quote(payload: QuoteBody):
    """Age, category, points and exposure defaults for an unsaved selection."""
    try:
        if payload.birthday:
            validate_iso_date(payload.birthday)
        if payload.scheduledDate:
            validate_iso_date(payload.scheduledDate)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    age = age_at(payload.birthday, payload.scheduledDate)
    category = age_category(age)
    return {
        "age": age,
        "ageCategory": category,
        "points": calculate_points(payload.types, payload.bitewingSides),
        "requiresToothSelection": requires_tooth_selection(payload.types),
        "exposures": {
            imaging_type: lookup_exposure(imaging_type, category, payload.bodyType).as_dict()
            for imaging_type in dict.fromkeys(payload.types)
        },
    }
