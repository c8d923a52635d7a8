"""Checks applied to a new request before anything is written."""

from __future__ import annotations

import re
from datetime import date
from typing import Optional

from exposure import ImagingType, is_valid_tooth
from records.models import validate_iso_date

from .errors import RequestValidationError, ValidationReason
from .models import CreateRequestPayload

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_new_request(payload: CreateRequestPayload, *, today: Optional[date] = None) -> None:
    """Raise ``RequestValidationError`` naming the first failed check."""
    if not payload.patient_name.strip() or not payload.patient_id.strip() or not payload.patient_birthday.strip():
        raise RequestValidationError(
            ValidationReason.MISSING_PATIENT_INFO,
            "Enter the patient's name, ID and birthday",
        )
    if not payload.types:
        raise RequestValidationError(ValidationReason.NO_IMAGING_TYPE, "Select at least one imaging type")
    if ImagingType.BITEWING in payload.types and not payload.bitewing_sides:
        raise RequestValidationError(
            ValidationReason.BITEWING_SIDE_REQUIRED,
            "Choose the bitewing side (right, left or both)",
        )

    invalid_teeth = sorted({tooth for tooth in payload.selected_teeth if not is_valid_tooth(tooth)})
    if invalid_teeth:
        raise RequestValidationError(
            ValidationReason.INVALID_TOOTH,
            f"Unknown tooth number(s): {', '.join(str(t) for t in invalid_teeth)}",
        )

    dates = [("birthday", payload.patient_birthday)]
    if payload.scheduled_date is not None:
        dates.append(("scheduled date", payload.scheduled_date))
    for label, value in dates:
        try:
            validate_iso_date(value)
        except ValueError:
            raise RequestValidationError(
                ValidationReason.INVALID_DATE, f"The {label} must use the YYYY-MM-DD format"
            ) from None
    if payload.scheduled_time is not None and not TIME_PATTERN.match(payload.scheduled_time.strip()):
        raise RequestValidationError(ValidationReason.INVALID_DATE, "The scheduled time must use the HH:MM format")

    # a request without a date is scheduled for today
    reference = payload.scheduled_date or (today or date.today()).isoformat()
    if payload.patient_birthday.strip() > reference.strip():
        raise RequestValidationError(
            ValidationReason.INVALID_DATE, "The birthday cannot be after the scheduled date"
        )
