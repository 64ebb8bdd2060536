"""
PHI Detection Profile - protected health information.

Patterns covered (case-insensitive, whole value):
    - Patient identifiers (PAT-123, PT_42, PATIENT7)
    - Medical record numbers (MRN-001, MR12)
    - Health plan identifiers (HP-9, HEALTH_1234)
"""

import re

from ..base_profile import DetectionPattern, DetectionProfile
from ..types import SensitivityClass

COMMON_PHI_FIELDS = [
    "patientId",
    "patientName",
    "medicalRecordNumber",
    "mrn",
    "diagnosis",
    "medication",
    "prescription",
    "healthPlanId",
    "insuranceId",
    "treatmentPlan",
    "labResults",
    "vitalSigns",
    "allergies",
]

PHI_PATTERNS = [
    DetectionPattern(
        name="patient_id",
        pattern=re.compile(r'^(PAT|PT|PATIENT)[-_]?\d+$', re.IGNORECASE),
        sensitivity=SensitivityClass.PHI,
        description="Patient identifier",
    ),
    DetectionPattern(
        name="medical_record_number",
        pattern=re.compile(r'^(MRN|MR)[-_]?\d+$', re.IGNORECASE),
        sensitivity=SensitivityClass.PHI,
        description="Medical record number",
    ),
    DetectionPattern(
        name="health_plan_id",
        pattern=re.compile(r'^(HP|HEALTH)[-_]?\d+$', re.IGNORECASE),
        sensitivity=SensitivityClass.PHI,
        description="Health plan identifier",
    ),
]


class PhiProfile(DetectionProfile):
    """Built-in profile for protected health information. No embedded detectors."""

    @property
    def name(self) -> str:
        return "phi"

    @property
    def description(self) -> str:
        return "Protected health information (patient, medical record and health plan identifiers)"

    @property
    def sensitivity(self) -> SensitivityClass:
        return SensitivityClass.PHI

    def get_field_names(self) -> list[str]:
        return list(COMMON_PHI_FIELDS)

    def get_value_patterns(self) -> list[DetectionPattern]:
        return list(PHI_PATTERNS)
