"""Filtering of completed requests for the history view."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from exposure import ImagingType
from records.models import ImagingRequestDTO, RequestStatus


@dataclass(frozen=True)
class HistoryFilter:
    """All set criteria must match. Dates are inclusive YYYY-MM-DD strings."""

    query: str = ""
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    imaging_type: Optional[ImagingType] = None

    @property
    def is_empty(self) -> bool:
        return not (self.query or self.date_from or self.date_to or self.imaging_type)

    def matches(self, request: ImagingRequestDTO) -> bool:
        if request.status != RequestStatus.COMPLETED:
            return False
        if self.query:
            needle = self.query.lower()
            if needle not in request.patient_name.lower() and needle not in request.patient_id.lower():
                return False
        # Plain string comparison is chronological for zero-padded ISO dates.
        if self.date_from and request.scheduled_date < self.date_from:
            return False
        if self.date_to and request.scheduled_date > self.date_to:
            return False
        if self.imaging_type is not None and self.imaging_type not in request.types:
            return False
        return True


def filter_history(requests: Iterable[ImagingRequestDTO], criteria: HistoryFilter) -> list[ImagingRequestDTO]:
    return [request for request in requests if criteria.matches(request)]


def patient_requests(
    requests: Iterable[ImagingRequestDTO],
    patient_id: str,
    status: RequestStatus,
) -> list[ImagingRequestDTO]:
    """Requests for one patient id with the given status, in input order."""
    return [r for r in requests if r.patient_id == patient_id and r.status == status]
