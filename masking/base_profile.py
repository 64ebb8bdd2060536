"""
Base Detection Profile - Abstract base class for built-in detection rules.

Extend this class to bundle the rules of one sensitivity class.
For example:
    - profiles/pii.py for personally identifiable information
    - profiles/phi.py for protected health information

Each profile defines:
    - name: Unique identifier for the profile
    - description: Human-readable description
    - sensitivity: The SensitivityClass its rules assign
    - get_field_names(): Common sensitive field names (word-matched)
    - get_value_patterns(): Anchored regexes classifying a whole value
    - get_scrubadub_detectors(): Optional scrubadub detectors used to find
      sensitive substrings inside free text
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional, Pattern

from scrubadub.detectors import RegexDetector
from scrubadub.filth import Filth

from .types import SensitivityClass


@dataclass(frozen=True)
class DetectionPattern:
    """A single built-in value pattern."""
    name: str  # e.g., "email", "patient_id"
    pattern: Pattern[str]  # Compiled regex, matched against the whole value
    sensitivity: SensitivityClass
    description: str = ""  # Human-readable description

    def matches(self, value: Any) -> bool:
        return isinstance(value, str) and self.pattern.fullmatch(value) is not None


class EmbeddedDetector(RegexDetector):
    """
    scrubadub RegexDetector used for embedded (substring) scanning.

    Zero-length matches and matches with fewer than `min_digits` digits are
    skipped. `partial` optionally names a shape-preserving partial renderer
    for what this detector finds.
    """
    name = "embedded"
    filth_cls = Filth
    partial = None
    min_digits = 0

    def iter_filth(self, text, document_name: Optional[str] = None):
        for match in self.regex.finditer(text):
            if match.end() == match.start():
                continue
            if self.min_digits and sum(c.isdigit() for c in match.group(0)) < self.min_digits:
                continue
            yield self.filth_cls(
                match=match,
                detector_name=self.name,
                document_name=document_name,
                locale=self.locale,
            )


class DetectionProfile(ABC):
    """
    Abstract base class for detection profiles.

    Example:
        class FinanceProfile(DetectionProfile):
            @property
            def name(self) -> str:
                return "finance"

            @property
            def description(self) -> str:
                return "Bank account numbers"

            @property
            def sensitivity(self) -> SensitivityClass:
                return SensitivityClass.PII

            def get_field_names(self) -> list[str]:
                return ["iban", "accountNumber"]

            def get_value_patterns(self) -> list[DetectionPattern]:
                return [
                    DetectionPattern(
                        name="iban",
                        pattern=re.compile(r'^[A-Z]{2}\\d{2}[A-Z0-9]{11,30}$'),
                        sensitivity=SensitivityClass.PII,
                    ),
                ]
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique identifier for this profile (e.g., 'pii', 'phi')."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable description of what this profile covers."""
        pass

    @property
    @abstractmethod
    def sensitivity(self) -> SensitivityClass:
        """Sensitivity class assigned by this profile's rules."""
        pass

    @abstractmethod
    def get_field_names(self) -> list[str]:
        """Common field names carrying this class of data, in camelCase."""
        pass

    @abstractmethod
    def get_value_patterns(self) -> list[DetectionPattern]:
        """
        Return the anchored value patterns of this profile.

        A value is classified only if it matches a pattern in its entirety.
        """
        pass

    def get_scrubadub_detectors(self) -> list[EmbeddedDetector]:
        """
        Optional: Return detectors for sensitive substrings in free text.

        Order matters: earlier detectors claim their matches first.
        By default, returns an empty list.
        """
        return []

    def __repr__(self) -> str:
        return f"<DetectionProfile: {self.name}>"
