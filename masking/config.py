"""
Masking configuration.

MaskingConfig is an immutable snapshot: every field has a default, values are
normalised and validated when the config is built, and a mask() call only
ever reads it. Use `replace()` (or MaskingEngine.update_config) to derive a
new configuration.

Configuration can also be read from the process environment (and a `.env`
file) with MaskingConfig.from_env():

    MASKING_ENV                 development | staging | production
    MASKING_HASH_ALGORITHM      any hashlib algorithm name (default sha256)
    MASKING_DETECT_PII          true/false (default true)
    MASKING_MASK_STRING_VALUES  true/false (default true)
    MASKING_PRESERVE_STRUCTURE  true/false (default true)
    MASKING_MAX_DEPTH           integer from 1 to 200 (default 100)
"""

import dataclasses
import hashlib
import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Union

from dotenv import load_dotenv

from .errors import ConfigurationError
from .types import (
    CustomPattern,
    Environment,
    FieldMatcher,
    MaskingRule,
    MaskingStrategy,
    coerce_enum,
)

DEFAULT_MAX_DEPTH = 100
# Traversal recurses a few frames per level; stay well inside the interpreter's recursion limit
MAX_DEPTH_LIMIT = 200

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _empty_mapping() -> Mapping[Environment, MaskingStrategy]:
    return MappingProxyType({})


def _coerce_mapping(mapping: Optional[Mapping[Any, Any]], what: str) -> Mapping[Environment, MaskingStrategy]:
    if not mapping:
        return MappingProxyType({})
    return MappingProxyType({
        coerce_enum(Environment, env, f"{what} environment"): coerce_enum(MaskingStrategy, strategy, f"{what} strategy")
        for env, strategy in mapping.items()
    })


def _coerce_rule(rule: Union[MaskingRule, Mapping[str, Any]]) -> MaskingRule:
    if isinstance(rule, MaskingRule):
        return rule
    try:
        return MaskingRule(**rule)
    except TypeError as e:
        raise ConfigurationError(f"Invalid masking rule definition: {e}") from e


def _coerce_pattern(pattern: Union[CustomPattern, Mapping[str, Any]]) -> CustomPattern:
    if isinstance(pattern, CustomPattern):
        return pattern
    return CustomPattern.from_mapping(dict(pattern))


def validate_hash_algorithm(name: str) -> str:
    try:
        hashlib.new(name, b"").hexdigest()
    except (ValueError, TypeError) as e:
        raise ConfigurationError(f"Unsupported hash algorithm: {name!r}") from e
    return name


@dataclass(frozen=True)
class MaskingConfig:
    """
    Full configuration of a masking engine.

    Args:
        env: Environment selecting the default strategy per sensitivity class.
        pii_fields: Field names (exact, case-insensitive) or compiled regexes
                    always treated as PII.
        phi_fields: Same, for PHI. Checked before pii_fields.
        masking_rules: Per-field overrides of the strategy.
        pii_environment_mapping: Environment -> strategy for PII (partial
                                 mappings fall back to the defaults).
        phi_environment_mapping: Environment -> strategy for PHI.
        detect_pii: Enable built-in field-name and value detection.
        mask_string_values: Enable scanning of free-text strings.
        hash_algorithm: hashlib algorithm used by the hash strategy.
        preserve_structure: Replace removed fields with "<removed>" instead of
                            dropping them.
        custom_patterns: Custom patterns, in priority order.
        max_depth: Containers nested this deep are masked out whole (1 to 200).
    """
    env: Environment = Environment.PRODUCTION
    pii_fields: tuple[FieldMatcher, ...] = ()
    phi_fields: tuple[FieldMatcher, ...] = ()
    masking_rules: tuple[MaskingRule, ...] = ()
    pii_environment_mapping: Mapping[Environment, MaskingStrategy] = field(default_factory=_empty_mapping)
    phi_environment_mapping: Mapping[Environment, MaskingStrategy] = field(default_factory=_empty_mapping)
    detect_pii: bool = True
    mask_string_values: bool = True
    hash_algorithm: str = "sha256"
    preserve_structure: bool = True
    custom_patterns: tuple[CustomPattern, ...] = ()
    max_depth: int = DEFAULT_MAX_DEPTH

    def __post_init__(self) -> None:
        set_ = object.__setattr__
        set_(self, "env", coerce_enum(Environment, self.env, "environment"))
        set_(self, "pii_fields", tuple(FieldMatcher.coerce(f) for f in _as_iterable(self.pii_fields)))
        set_(self, "phi_fields", tuple(FieldMatcher.coerce(f) for f in _as_iterable(self.phi_fields)))
        set_(self, "masking_rules", tuple(_coerce_rule(r) for r in _as_iterable(self.masking_rules)))
        set_(self, "pii_environment_mapping", _coerce_mapping(self.pii_environment_mapping, "PII"))
        set_(self, "phi_environment_mapping", _coerce_mapping(self.phi_environment_mapping, "PHI"))
        set_(self, "hash_algorithm", validate_hash_algorithm(self.hash_algorithm))

        patterns = tuple(_coerce_pattern(p) for p in _as_iterable(self.custom_patterns))
        seen: set[str] = set()
        for pattern in patterns:
            if pattern.name in seen:
                raise ConfigurationError(f"Custom pattern '{pattern.name}' already exists")
            seen.add(pattern.name)
        set_(self, "custom_patterns", patterns)

        for name in ("detect_pii", "mask_string_values", "preserve_structure"):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean, got {getattr(self, name)!r}")

        if (
            isinstance(self.max_depth, bool)
            or not isinstance(self.max_depth, int)
            or not 1 <= self.max_depth <= MAX_DEPTH_LIMIT
        ):
            raise ConfigurationError(
                f"max_depth must be an integer from 1 to {MAX_DEPTH_LIMIT}, got {self.max_depth!r}"
            )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None, **overrides: Any) -> "MaskingConfig":
        """
        Build a configuration from MASKING_* environment variables.

        Args:
            dotenv_path: Optional path of a .env file to load first (existing
                         environment variables are not overridden).
            **overrides: Explicit values taking precedence over the environment.
        """
        load_dotenv(dotenv_path)

        values: dict[str, Any] = {}
        env = os.getenv("MASKING_ENV")
        if env:
            values["env"] = env.strip().lower()
        algorithm = os.getenv("MASKING_HASH_ALGORITHM")
        if algorithm:
            values["hash_algorithm"] = algorithm.strip()
        for name in ("detect_pii", "mask_string_values", "preserve_structure"):
            flag = _env_bool(f"MASKING_{name.upper()}")
            if flag is not None:
                values[name] = flag
        max_depth = os.getenv("MASKING_MAX_DEPTH")
        if max_depth:
            try:
                values["max_depth"] = int(max_depth)
            except ValueError:
                raise ConfigurationError(f"MASKING_MAX_DEPTH must be an integer, got {max_depth!r}") from None

        values.update(overrides)
        return cls(**values)

    def replace(self, **changes: Any) -> "MaskingConfig":
        """
        Return a new configuration with the given fields replaced wholesale.

        Lists and mappings are not merged: a new pii_fields list replaces the
        old one entirely.
        """
        unknown = sorted(set(changes) - {f.name for f in dataclasses.fields(self)})
        if unknown:
            raise ConfigurationError(f"Unknown configuration field(s): {', '.join(unknown)}")
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Serialisable view of the configuration (transforms reported by presence only)."""
        return {
            "env": self.env.value,
            "pii_fields": [f.to_dict() for f in self.pii_fields],
            "phi_fields": [f.to_dict() for f in self.phi_fields],
            "masking_rules": [r.to_dict() for r in self.masking_rules],
            "pii_environment_mapping": {e.value: s.value for e, s in self.pii_environment_mapping.items()},
            "phi_environment_mapping": {e.value: s.value for e, s in self.phi_environment_mapping.items()},
            "detect_pii": self.detect_pii,
            "mask_string_values": self.mask_string_values,
            "hash_algorithm": self.hash_algorithm,
            "preserve_structure": self.preserve_structure,
            "custom_patterns": [p.to_dict() for p in self.custom_patterns],
            "max_depth": self.max_depth,
        }


def _as_iterable(value: Any) -> Iterable[Any]:
    # A lone string or pattern is a single entry, not a sequence of characters
    if value is None:
        return ()
    if isinstance(value, (str, re.Pattern, FieldMatcher, MaskingRule, CustomPattern, Mapping)):
        return (value,)
    return value


def _env_bool(name: str) -> Optional[bool]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")
