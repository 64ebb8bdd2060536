"""
Detector - decides whether a field or value is sensitive.

The detector combines three sources of knowledge:
1. Detection profiles (built-in field names and anchored value patterns)
2. Custom patterns registered by the user (always consulted first at the
   value level)
3. scrubadub detectors used to find sensitive substrings in free text

Field-name matching works on words, not raw substrings: "ipAddress" contains
the word "ip", "description" does not.
"""

import logging
import re
from typing import Any, Iterable, Iterator, Optional, Union

from scrubadub.filth import Filth

from .base_profile import DetectionProfile, EmbeddedDetector
from .errors import ConfigurationError
from .profiles import DEFAULT_PROFILES
from .strategies import REMOVED_PLACEHOLDER, apply_strategy, run_transform
from .types import CustomPattern, MaskingStrategy, SensitivityClass

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")
# Acronym runs ("IP" in "IPAddress"), capitalised or lower-case words; digits stay attached
_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z0-9]+|[0-9]+")


def split_words(name: str) -> tuple[str, ...]:
    """
    Split a field name into lower-case words.

    Example:
        split_words("ipAddress")      # ("ip", "address")
        split_words("patient_id")     # ("patient", "id")
        split_words("IPAddress")      # ("ip", "address")
        split_words("email1")         # ("email1",)
    """
    words: list[str] = []
    for chunk in _SEPARATOR_RE.split(name):
        words.extend(word.lower() for word in _WORD_RE.findall(chunk))
    return tuple(words)


class FieldNameMatcher:
    """Word-boundary matcher for a list of common sensitive field names."""

    def __init__(self, names: Iterable[str]):
        self._entries = []
        for name in names:
            words = split_words(name)
            if words:
                self._entries.append((words, "".join(words)))

    def matches(self, field_name: str) -> bool:
        words = split_words(field_name)
        if not words:
            return False
        for entry_words, joined in self._entries:
            if joined in words or _contains_run(words, entry_words):
                return True
        return False


def _contains_run(words: tuple[str, ...], run: tuple[str, ...]) -> bool:
    size = len(run)
    return any(words[i:i + size] == run for i in range(len(words) - size + 1))


_BUILT_IN_ORDER = [profile.name for profile in DEFAULT_PROFILES]


def _profile_rank(name: str) -> int:
    if name in _BUILT_IN_ORDER:
        return _BUILT_IN_ORDER.index(name)
    return len(_BUILT_IN_ORDER)


class CustomPatternFilth(Filth):
    type = "custom_pattern"


class CustomPatternDetector(EmbeddedDetector):
    """Runs a custom pattern de-anchored and wrapped in word boundaries."""
    filth_cls = CustomPatternFilth

    def __init__(self, pattern: CustomPattern):
        super().__init__(name=f"custom_{pattern.name}")
        self.pattern = pattern
        self.regex = pattern.embedded_regex


class Detector:
    """
    Classifies field names and values, and masks sensitive substrings.

    Example:
        detector = Detector()
        detector.classify("ipAddress", "10.0.0.1")     # SensitivityClass.PII
        detector.classify("description", "hello")     # None
        detector.scan_and_mask_embedded("mail me: jane@example.com", MaskingStrategy.FULL)
        # "mail me: ********"

    Thread Safety:
        Classification and scanning only read the detector's state. Registry
        changes (load_profile, add/remove/clear custom patterns) must not run
        concurrently with them.
    """

    def __init__(
        self,
        custom_patterns: Iterable[Union[CustomPattern, dict]] = (),
        auto_detect: bool = True,
        hash_algorithm: str = "sha256",
        profiles: Optional[Iterable[DetectionProfile]] = None,
    ):
        """
        Initialize the Detector.

        Args:
            custom_patterns: Custom patterns to register, in priority order.
            auto_detect: If False, built-in field-name and value detection is
                         skipped. Custom patterns and embedded scanning still apply.
            hash_algorithm: hashlib algorithm used when masking embedded matches.
            profiles: Built-in profiles to load. Defaults to PHI then PII.

        Raises:
            ConfigurationError: if two custom patterns share a name.
        """
        self.auto_detect = auto_detect
        self.hash_algorithm = hash_algorithm
        self._profiles: dict[str, DetectionProfile] = {}
        self._field_matchers: dict[str, FieldNameMatcher] = {}
        self._embedded_detectors: list[EmbeddedDetector] = []
        self._custom_patterns: dict[str, CustomPattern] = {}
        self._custom_detectors: dict[str, CustomPatternDetector] = {}

        for profile in (DEFAULT_PROFILES if profiles is None else profiles):
            self._register_profile(profile)
            logger.debug(f"Loaded detection profile: {profile.name}")
        self._rebuild_embedded_detectors()
        for pattern in custom_patterns:
            self.add_custom_pattern(pattern)

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def load_profile(self, profile: DetectionProfile) -> None:
        """
        Load a detection profile. A profile with the same name is replaced.

        Built-in profiles keep their PHI-then-PII order whatever the load
        order; other profiles are consulted after them, in load order.
        """
        self._register_profile(profile)
        self._rebuild_embedded_detectors()
        logger.info(f"Loaded detection profile: {profile.name}")

    def unload_profile(self, profile_name: str) -> bool:
        if profile_name not in self._profiles:
            return False
        del self._profiles[profile_name]
        del self._field_matchers[profile_name]
        self._rebuild_embedded_detectors()
        logger.info(f"Unloaded detection profile: {profile_name}")
        return True

    def _register_profile(self, profile: DetectionProfile) -> None:
        self._profiles[profile.name] = profile
        self._field_matchers[profile.name] = FieldNameMatcher(profile.get_field_names())
        self._profiles = dict(sorted(self._profiles.items(), key=lambda item: _profile_rank(item[0])))

    def list_profiles(self) -> list[str]:
        return list(self._profiles.keys())

    def _rebuild_embedded_detectors(self) -> None:
        self._embedded_detectors = [
            detector
            for profile in self._profiles.values()
            for detector in profile.get_scrubadub_detectors()
        ]

    # ------------------------------------------------------------------
    # Custom pattern registry
    # ------------------------------------------------------------------

    def add_custom_pattern(self, pattern: Union[CustomPattern, dict]) -> CustomPattern:
        """
        Register a custom pattern.

        Raises:
            ConfigurationError: if a pattern with the same name already exists,
                                or the definition is invalid.
        """
        if not isinstance(pattern, CustomPattern):
            pattern = CustomPattern.from_mapping(pattern)
        if pattern.name in self._custom_patterns:
            raise ConfigurationError(f"Custom pattern '{pattern.name}' already exists")

        self._custom_patterns[pattern.name] = pattern
        self._custom_detectors[pattern.name] = CustomPatternDetector(pattern)
        logger.info(f"Added custom pattern: {pattern.name} ({pattern.sensitivity.value})")
        return pattern

    def remove_custom_pattern(self, name: str) -> bool:
        if name not in self._custom_patterns:
            return False
        del self._custom_patterns[name]
        del self._custom_detectors[name]
        logger.info(f"Removed custom pattern: {name}")
        return True

    def get_custom_patterns(self) -> list[CustomPattern]:
        return list(self._custom_patterns.values())

    def clear_custom_patterns(self) -> None:
        self._custom_patterns.clear()
        self._custom_detectors.clear()
        logger.info("Cleared all custom patterns")

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def classify_field_name(self, name: str) -> Optional[SensitivityClass]:
        """Classify a field by its name alone (PHI list first, then PII)."""
        for profile_name, profile in self._profiles.items():
            if self._field_matchers[profile_name].matches(name):
                return profile.sensitivity
        return None

    def classify_value(self, value: Any) -> Optional[SensitivityClass]:
        """Classify a value by the built-in patterns. Only whole-value matches count."""
        if not isinstance(value, str):
            return None
        for profile in self._profiles.values():
            for pattern in profile.get_value_patterns():
                if pattern.matches(value):
                    return pattern.sensitivity
        return None

    def classify_custom_value_exact(self, value: Any) -> Optional[CustomPattern]:
        """Return the first custom pattern matching the whole trimmed value."""
        if not isinstance(value, str):
            return None
        for pattern in self._custom_patterns.values():
            if pattern.matches_exactly(value):
                return pattern
        return None

    def classify(self, name: Optional[str], value: Any) -> Optional[SensitivityClass]:
        """
        Classify a field from its name and value.

        Order: built-in field name, custom pattern (exact), built-in PHI value,
        built-in PII value. Built-in steps are skipped when auto_detect is off.
        """
        if self.auto_detect and name:
            by_name = self.classify_field_name(name)
            if by_name is not None:
                return by_name

        custom = self.classify_custom_value_exact(value)
        if custom is not None:
            return custom.sensitivity

        if self.auto_detect:
            return self.classify_value(value)
        return None

    # ------------------------------------------------------------------
    # Embedded scanning
    # ------------------------------------------------------------------

    def iter_embedded_filth(self, text: str) -> Iterator[tuple[EmbeddedDetector, Filth]]:
        """
        Yield non-overlapping sensitive substrings of text.

        Custom patterns claim their spans first, then the built-in detectors
        in profile order. A later match overlapping a claimed span is dropped.
        """
        claimed: list[tuple[int, int]] = []
        detectors = list(self._custom_detectors.values()) + self._embedded_detectors
        for detector in detectors:
            for filth in detector.iter_filth(text):
                if any(filth.beg < end and beg < filth.end for beg, end in claimed):
                    continue
                claimed.append((filth.beg, filth.end))
                yield detector, filth

    def scan_and_mask_embedded(self, text: Any, default_strategy: MaskingStrategy) -> Any:
        """
        Mask sensitive substrings inside free text.

        Args:
            text: The string to scan. Non-strings are returned unchanged.
            default_strategy: Strategy for matches whose pattern does not
                              carry its own transform or strategy.

        Returns:
            The text with every match replaced and all other text preserved.
        """
        if not isinstance(text, str) or not text:
            return text

        replacements = []
        for detector, filth in self.iter_embedded_filth(text):
            replacements.append((filth.beg, filth.end, self._replace(filth.text, detector, default_strategy)))

        if not replacements:
            return text

        replacements.sort(key=lambda item: item[0])
        pieces = []
        cursor = 0
        for beg, end, replacement in replacements:
            pieces.append(text[cursor:beg])
            pieces.append(replacement)
            cursor = end
        pieces.append(text[cursor:])
        return "".join(pieces)

    def _replace(self, match: str, detector: EmbeddedDetector, default_strategy: MaskingStrategy) -> str:
        if isinstance(detector, CustomPatternDetector):
            pattern = detector.pattern
            if pattern.transform is not None:
                return str(run_transform(pattern.transform, match, pattern.name))
            strategy = pattern.strategy or default_strategy
            masked = apply_strategy(match, strategy, self.hash_algorithm)
        else:
            masked = apply_strategy(match, default_strategy, self.hash_algorithm, partial=detector.partial)
        return REMOVED_PLACEHOLDER if masked is None else masked

