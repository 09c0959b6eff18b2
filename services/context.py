"""
Per-request patient context.

Every service call receives a PatientContext instead of reading a
module-level patient id, so the same code serves the patient view and the
clinician's read-only view of any patient.
"""
from dataclasses import dataclass

VIEWER_ROLES = ("patient", "clinician")


@dataclass(frozen=True)
class PatientContext:
    """Who is being looked at, and by whom."""

    patient_id: str
    viewer_role: str = "patient"

    def __post_init__(self):
        if self.viewer_role not in VIEWER_ROLES:
            raise ValueError(f"Unknown viewer role: {self.viewer_role}")

    @property
    def read_only(self) -> bool:
        return self.viewer_role == "clinician"


__all__ = ["PatientContext", "VIEWER_ROLES"]
