"""Patient-related exceptions."""

from __future__ import annotations


class PatientNotFoundError(LookupError):
    """Raised when a patient id is not in the record store."""

    def __init__(self, patient_id: str) -> None:
        self.patient_id = patient_id
        super().__init__(f"Patient {patient_id} not found")


class DeletionNotConfirmedError(RuntimeError):
    """Raised when a patient delete is attempted without explicit confirmation."""

    def __init__(self, patient_id: str) -> None:
        self.patient_id = patient_id
        super().__init__(f"Deleting patient {patient_id} cannot be undone and must be confirmed")
