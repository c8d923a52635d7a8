"""Exceptions raised by the request lifecycle."""

from __future__ import annotations

import enum


class ValidationReason(str, enum.Enum):
    MISSING_PATIENT_INFO = "missing_patient_info"
    NO_IMAGING_TYPE = "no_imaging_type"
    BITEWING_SIDE_REQUIRED = "bitewing_side_required"
    INVALID_TOOTH = "invalid_tooth"
    INVALID_DATE = "invalid_date"


class RequestValidationError(ValueError):
    """Raised before any write when a new request is not acceptable."""

    def __init__(self, reason: ValidationReason, message: str) -> None:
        self.reason = reason
        self.message = message
        super().__init__(message)


class RequestNotFoundError(LookupError):
    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Request {request_id} not found")


class RequestStateError(RuntimeError):
    """Raised when an operation does not fit the request's current status."""


class IncompleteRadiationLogError(ValueError):
    """Raised when a completion does not carry exactly one log per imaging type."""
