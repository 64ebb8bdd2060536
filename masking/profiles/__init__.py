"""
Detection Profiles Package

This package contains the built-in detection profiles used by the Detector.
Add new profiles here to extend built-in detection.

Available profiles:
    - pii: personally identifiable information (email, phone, SSN, card, IPv4)
    - phi: protected health information (patient, MRN, health plan ids)

To add a new profile:
    1. Create a new file (e.g., finance.py)
    2. Subclass DetectionProfile
    3. Implement get_field_names() and get_value_patterns()
    4. Pass it to Detector(profiles=[...]) or detector.load_profile()

Profiles are consulted PHI first, then PII, so DEFAULT_PROFILES keeps that order.
"""

from .phi import COMMON_PHI_FIELDS, PHI_PATTERNS, PhiProfile
from .pii import COMMON_PII_FIELDS, PII_PATTERNS, PiiProfile

DEFAULT_PROFILES = (PhiProfile(), PiiProfile())

__all__ = [
    "COMMON_PHI_FIELDS",
    "COMMON_PII_FIELDS",
    "DEFAULT_PROFILES",
    "PHI_PATTERNS",
    "PII_PATTERNS",
    "PhiProfile",
    "PiiProfile",
]
