"""
Core data model for the masking engine.

Everything a caller configures is represented as immutable data:
    - SensitivityClass / MaskingStrategy / Environment: string enums
    - FieldMatcher: tagged matcher data (exact field name or regex)
    - MaskingRule: per-field override of the environment strategy
    - CustomPattern: user-registered value detector with its own behaviour

and everything a mask() call produces is plain result data:
    - DetectedField: one record per masked field or embedded match
    - MaskingResult: masked tree plus the detection records
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Pattern, Union

from .errors import ConfigurationError


class SensitivityClass(str, Enum):
    PII = "pii"
    PHI = "phi"
    CUSTOM = "custom"


class MaskingStrategy(str, Enum):
    PARTIAL = "partial"
    FULL = "full"
    HASH = "hash"
    REMOVE = "remove"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


# Strategy label recorded when a transform function produced the masked value
CUSTOM_TRANSFORM = "custom"

MaskTransform = Callable[[Any], Any]


def coerce_enum(enum_cls: type[Enum], value: Any, what: str) -> Any:
    """
    Convert a plain string (or an enum member) into a member of enum_cls.

    Raises:
        ConfigurationError: if value is not a valid member.
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ConfigurationError(
            f"Invalid {what} {value!r} (expected one of: {allowed})"
        ) from None


def _compile(source: str, flags: int, what: str) -> Pattern[str]:
    try:
        return re.compile(source, flags)
    except re.error as e:
        raise ConfigurationError(f"Malformed regular expression for {what}: {source!r} ({e})") from e


@dataclass(frozen=True)
class FieldMatcher:
    """
    Tagged matcher for field names.

    kind="exact" compares the whole field name case-insensitively,
    kind="pattern" runs a regular-expression search against the field name.
    """
    kind: str
    value: str
    flags: int = 0
    _regex: Optional[Pattern[str]] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.kind not in ("exact", "pattern"):
            raise ConfigurationError(f"Unknown field matcher kind: {self.kind!r}")
        if not isinstance(self.value, str):
            raise ConfigurationError(f"Field matcher value must be a string, got {type(self.value).__name__}")
        if self.kind == "pattern":
            object.__setattr__(self, "_regex", _compile(self.value, self.flags, "field matcher"))

    @classmethod
    def exact(cls, name: str) -> "FieldMatcher":
        return cls("exact", name)

    @classmethod
    def regex(cls, source: str, flags: int = 0) -> "FieldMatcher":
        return cls("pattern", source, flags)

    @classmethod
    def coerce(cls, item: Union[str, Pattern[str], "FieldMatcher"]) -> "FieldMatcher":
        """Plain strings become exact matchers, compiled patterns become regex matchers."""
        if isinstance(item, FieldMatcher):
            return item
        if isinstance(item, str):
            return cls.exact(item)
        if isinstance(item, re.Pattern):
            return cls.regex(item.pattern, item.flags)
        raise ConfigurationError(f"Unsupported field matcher: {item!r}")

    def matches(self, field_name: str) -> bool:
        if self.kind == "exact":
            return self.value.lower() == field_name.lower()
        return self._regex.search(field_name) is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "value": self.value}
        if self.flags:
            data["flags"] = self.flags
        return data


@dataclass(frozen=True)
class MaskingRule:
    """
    Explicit per-field override: fields matching `field` always use `strategy`
    (or `transform`, when given) regardless of their sensitivity class.
    """
    field: Union[str, Pattern[str], FieldMatcher]
    strategy: MaskingStrategy = MaskingStrategy.FULL
    transform: Optional[MaskTransform] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "field", FieldMatcher.coerce(self.field))
        object.__setattr__(self, "strategy", coerce_enum(MaskingStrategy, self.strategy, "masking strategy"))

    def matches(self, field_name: str) -> bool:
        return self.field.matches(field_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field.to_dict(),
            "strategy": self.strategy.value,
            "transform": self.transform is not None,
        }


_INLINE_FLAGS_RE = re.compile(r"\(\?[aiLmsux]+\)")


def _embedded_source(source: str) -> tuple[str, str]:
    """Split leading inline flags off and strip ^/$ anchors from a regex source."""
    prefix = ""
    inline = _INLINE_FLAGS_RE.match(source)
    if inline:
        prefix = inline.group(0)
        source = source[inline.end():]
    if source.startswith("^"):
        source = source[1:]
    if source.endswith("$"):
        escapes = len(source[:-1]) - len(source[:-1].rstrip("\\"))
        if escapes % 2 == 0:
            source = source[:-1]
    return prefix, source


@dataclass(frozen=True)
class CustomPattern:
    """
    A user-registered detection rule.

    Args:
        name: Unique (per engine) identifier of the pattern.
        pattern: Regex source or compiled pattern. Usually anchored, e.g. r"^EMP-\\d{6}$".
        sensitivity: Class assigned to matching values ("pii", "phi" or "custom").
        strategy: Optional strategy that overrides the environment default.
        transform: Optional function producing the masked value; wins over strategy.
        description: Human-readable description.

    Example:
        CustomPattern(
            name="employee_id",
            pattern=re.compile(r"^EMP-\\d{6}$", re.IGNORECASE),
            sensitivity="pii",
            strategy="partial",
        )
    """
    name: str
    pattern: Union[str, Pattern[str]]
    sensitivity: SensitivityClass = SensitivityClass.CUSTOM
    strategy: Optional[MaskingStrategy] = None
    transform: Optional[MaskTransform] = None
    description: str = ""
    regex: Pattern[str] = field(init=False, repr=False, compare=False)
    embedded_regex: Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError(f"Custom pattern name must be a non-empty string, got {self.name!r}")

        if isinstance(self.pattern, re.Pattern):
            regex = self.pattern
        elif isinstance(self.pattern, str):
            regex = _compile(self.pattern, 0, f"custom pattern '{self.name}'")
        else:
            raise ConfigurationError(
                f"Custom pattern '{self.name}' must be a regex string or compiled pattern"
            )

        prefix, source = _embedded_source(regex.pattern)
        embedded = _compile(rf"{prefix}\b(?:{source})\b", regex.flags, f"custom pattern '{self.name}'")

        object.__setattr__(self, "regex", regex)
        object.__setattr__(self, "embedded_regex", embedded)
        object.__setattr__(self, "sensitivity", coerce_enum(SensitivityClass, self.sensitivity, "sensitivity class"))
        if self.strategy is not None:
            object.__setattr__(self, "strategy", coerce_enum(MaskingStrategy, self.strategy, "masking strategy"))

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "CustomPattern":
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid custom pattern definition: {e}") from e

    def matches_exactly(self, value: Any) -> bool:
        """True only if the whole (trimmed) string value is matched by the pattern."""
        if not isinstance(value, str):
            return False
        return self.regex.fullmatch(value.strip()) is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "pattern": self.regex.pattern,
            "sensitivity": self.sensitivity.value,
            "strategy": self.strategy.value if self.strategy else None,
            "transform": self.transform is not None,
            "description": self.description,
        }


@dataclass
class DetectedField:
    """A single masked field (or embedded match) found during traversal."""
    path: str
    sensitivity: SensitivityClass
    value: Any  # original, unmasked value
    strategy: str  # a MaskingStrategy value, or CUSTOM_TRANSFORM
    custom_pattern: Optional[str] = None


@dataclass
class MaskingResult:
    """Outcome of a mask() call. `masked` never shares containers with the input."""
    masked: Any
    fields_processed: int = 0
    detected_fields: list[DetectedField] = field(default_factory=list)
