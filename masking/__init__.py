"""
Masking Module - PII/PHI masking for structured log data

This module masks sensitive values anywhere inside arbitrarily nested data
(dicts, lists, tuples) before it is logged or handed to another system.

Architecture:
    - MaskingEngine: Core engine that walks the data and masks sensitive fields
    - Detector: Classifies field names and values, scans free text (scrubadub)
    - RuleResolver: Picks the strategy per field from rules and the environment
    - MaskingConfig: Immutable configuration (also readable from MASKING_* env vars)
    - profiles/: Built-in PII and PHI detection profiles

Example:
    from masking import MaskingEngine

    engine = MaskingEngine(env="development")
    result = engine.mask({"email": "john@gmail.com", "note": "call +919999999999"})
    # result.masked: {"email": "j****@gmail.com", "note": "call ********9999"}
    # result.fields_processed: 2
"""

from .base_profile import DetectionPattern, DetectionProfile
from .config import MaskingConfig
from .detector import Detector
from .engine import MaskingEngine, mask
from .errors import ConfigurationError, MaskingError
from .logging_adapter import MaskingFilter, MaskingLoggerAdapter
from .rules import RuleResolver
from .types import (
    CustomPattern,
    DetectedField,
    Environment,
    FieldMatcher,
    MaskingResult,
    MaskingRule,
    MaskingStrategy,
    SensitivityClass,
)

__all__ = [
    "ConfigurationError",
    "CustomPattern",
    "DetectedField",
    "DetectionPattern",
    "DetectionProfile",
    "Detector",
    "Environment",
    "FieldMatcher",
    "MaskingConfig",
    "MaskingEngine",
    "MaskingError",
    "MaskingFilter",
    "MaskingLoggerAdapter",
    "MaskingResult",
    "MaskingRule",
    "MaskingStrategy",
    "RuleResolver",
    "SensitivityClass",
    "mask",
]
