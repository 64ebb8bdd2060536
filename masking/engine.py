"""
MaskingEngine - Core engine for masking sensitive data in structured values.

This engine orchestrates:
1. Deep cloning of the input, so the caller's object is never mutated
2. Field classification (explicit field lists, then the Detector)
3. Strategy selection (custom pattern, then the RuleResolver)
4. Embedded scanning of free-text strings
5. Tracking of every masked field as a DetectedField record

A mask() call is synchronous and performs no I/O.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Union

from .cloning import deep_clone
from .config import MaskingConfig
from .detector import Detector
from .rules import RuleResolver
from .strategies import REMOVED_PLACEHOLDER, apply_strategy, run_transform
from .types import (
    CUSTOM_TRANSFORM,
    CustomPattern,
    DetectedField,
    MaskingResult,
    MaskingStrategy,
    SensitivityClass,
)

logger = logging.getLogger(__name__)

_REMOVED = object()


@dataclass(frozen=True)
class _Pass:
    """Read-only state captured at the start of a mask() call."""
    config: MaskingConfig
    detector: Detector
    resolver: RuleResolver
    embedded_strategy: MaskingStrategy


class MaskingEngine:
    """
    Engine for masking PII/PHI inside arbitrary nested data.

    Example:
        engine = MaskingEngine(env="development", pii_fields=["email"])

        result = engine.mask({"email": "john@gmail.com", "name": "John"})
        # result.masked: {"email": "j****@gmail.com", "name": "John"}
        # result.fields_processed: 1

        # Runtime custom patterns
        engine.add_custom_pattern(CustomPattern(
            name="employee_id",
            pattern=r"^EMP-\\d{6}$",
            sensitivity="pii",
            strategy="partial",
        ))

    Thread Safety:
        mask() may run concurrently as long as the configuration is not being
        changed at the same time. update_config() and the custom pattern
        methods must be serialised by the caller.
    """

    def __init__(self, config: Optional[MaskingConfig] = None, **overrides: Any):
        """
        Initialize the MaskingEngine.

        Args:
            config: A MaskingConfig. Defaults to MaskingConfig().
            **overrides: Configuration fields replacing those of config.

        Raises:
            ConfigurationError: if the configuration is invalid.
        """
        config = config or MaskingConfig()
        if overrides:
            config = config.replace(**overrides)
        self._apply_config(config)

    def _apply_config(self, config: MaskingConfig) -> None:
        self._config = config
        self._detector = Detector(
            custom_patterns=config.custom_patterns,
            auto_detect=config.detect_pii,
            hash_algorithm=config.hash_algorithm,
        )
        self._resolver = RuleResolver(
            rules=config.masking_rules,
            env=config.env,
            hash_algorithm=config.hash_algorithm,
            pii_mapping=config.pii_environment_mapping,
            phi_mapping=config.phi_environment_mapping,
        )
        logger.debug(
            f"Masking engine configured: env={config.env.value}, "
            f"custom_patterns={len(config.custom_patterns)}, rules={len(config.masking_rules)}"
        )

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def update_config(self, **changes: Any) -> None:
        """
        Replace configuration fields wholesale and rebuild internal tables.

        Omitted fields keep their current value; supplied lists and mappings
        replace (not extend) the current ones.

        Raises:
            ConfigurationError: on unknown fields or invalid values.
        """
        self._apply_config(self._config.replace(**changes))

    def get_config(self) -> MaskingConfig:
        """Return the current (immutable) configuration."""
        return self._config

    # ------------------------------------------------------------------
    # Custom patterns
    # ------------------------------------------------------------------

    def add_custom_pattern(self, pattern: Union[CustomPattern, dict]) -> None:
        """
        Register a custom pattern.

        Raises:
            ConfigurationError: if a pattern with that name already exists.
        """
        added = self._detector.add_custom_pattern(pattern)
        self._config = self._config.replace(custom_patterns=self._config.custom_patterns + (added,))

    def remove_custom_pattern(self, name: str) -> bool:
        """
        Remove a custom pattern.

        Returns:
            True if the pattern was removed, False if not found.
        """
        if not self._detector.remove_custom_pattern(name):
            return False
        self._config = self._config.replace(
            custom_patterns=tuple(p for p in self._config.custom_patterns if p.name != name)
        )
        return True

    def get_custom_patterns(self) -> list[CustomPattern]:
        return self._detector.get_custom_patterns()

    def clear_custom_patterns(self) -> None:
        self._detector.clear_custom_patterns()
        self._config = self._config.replace(custom_patterns=())

    # ------------------------------------------------------------------
    # Masking
    # ------------------------------------------------------------------

    def mask(self, data: Any) -> MaskingResult:
        """
        Mask sensitive data in the given value.

        Args:
            data: Any value; dicts, lists and tuples are traversed.

        Returns:
            A MaskingResult whose `masked` tree is independent of `data`.

        Example:
            result = engine.mask({"user": {"contacts": [{"email": "a@b.io"}]}})
            result.detected_fields[0].path  # "user.contacts[0].email"
        """
        if data is None:
            return MaskingResult(masked=None, fields_processed=0, detected_fields=[])

        state = _Pass(
            config=self._config,
            detector=self._detector,
            resolver=self._resolver,
            embedded_strategy=self._resolver.default_strategy(SensitivityClass.PII),
        )
        cloned = deep_clone(data, state.config.max_depth)
        detected: list[DetectedField] = []

        if _is_container(cloned):
            masked = self._mask_node(state, cloned, "", None, detected)
        else:
            masked = cloned

        logger.debug(f"Masked {len(detected)} field(s)")
        return MaskingResult(masked=masked, fields_processed=len(detected), detected_fields=detected)

    def _mask_node(
        self,
        state: _Pass,
        node: Any,
        path: str,
        field_name: Optional[str],
        detected: list[DetectedField],
    ) -> Any:
        if isinstance(node, Mapping):
            return self._mask_mapping(state, node, path, detected)
        return self._mask_sequence(state, node, path, field_name, detected)

    def _mask_mapping(
        self,
        state: _Pass,
        node: Mapping,
        path: str,
        detected: list[DetectedField],
    ) -> dict:
        masked = {}
        for key, value in node.items():
            name = key if isinstance(key, str) else str(key)
            current_path = f"{path}.{name}" if path else name
            sensitivity = self._classify_field(state, name, value)

            if sensitivity is not None:
                result = self._mask_classified(state, name, value, sensitivity, current_path, detected)
                if result is not _REMOVED:
                    masked[key] = result
            else:
                masked[key] = self._mask_unclassified(state, value, current_path, name, detected)
        return masked

    def _mask_sequence(
        self,
        state: _Pass,
        node: Union[list, tuple],
        path: str,
        field_name: Optional[str],
        detected: list[DetectedField],
    ) -> Union[list, tuple]:
        items = []
        for index, item in enumerate(node):
            current_path = f"{path}[{index}]"
            sensitivity = self._classify_element(state, item)

            if sensitivity is not None:
                result = self._mask_classified(state, field_name, item, sensitivity, current_path, detected)
                if result is not _REMOVED:
                    items.append(result)
            else:
                items.append(self._mask_unclassified(state, item, current_path, field_name, detected))
        return tuple(items) if isinstance(node, tuple) else items

    def _mask_unclassified(
        self,
        state: _Pass,
        value: Any,
        path: str,
        field_name: Optional[str],
        detected: list[DetectedField],
    ) -> Any:
        if _is_container(value):
            return self._mask_node(state, value, path, field_name, detected)

        if isinstance(value, str) and state.config.mask_string_values:
            scanned = state.detector.scan_and_mask_embedded(value, state.embedded_strategy)
            if scanned != value:
                detected.append(DetectedField(
                    path=path,
                    sensitivity=SensitivityClass.PII,
                    value=value,
                    strategy=state.embedded_strategy.value,
                ))
            return scanned

        return value

    # ------------------------------------------------------------------
    # Classification and strategy
    # ------------------------------------------------------------------

    def _classify_field(self, state: _Pass, name: str, value: Any) -> Optional[SensitivityClass]:
        # Explicit configuration outranks auto-detection
        if any(matcher.matches(name) for matcher in state.config.phi_fields):
            return SensitivityClass.PHI
        if any(matcher.matches(name) for matcher in state.config.pii_fields):
            return SensitivityClass.PII
        return state.detector.classify(name, value)

    def _classify_element(self, state: _Pass, value: Any) -> Optional[SensitivityClass]:
        if not isinstance(value, str):
            return None
        return state.detector.classify(None, value)

    def _mask_classified(
        self,
        state: _Pass,
        name: Optional[str],
        value: Any,
        sensitivity: SensitivityClass,
        path: str,
        detected: list[DetectedField],
    ) -> Any:
        pattern = state.detector.classify_custom_value_exact(value)
        if pattern is not None and pattern.sensitivity != sensitivity:
            pattern = None

        if pattern is not None and pattern.transform is not None:
            masked, applied = run_transform(pattern.transform, value, pattern.name), CUSTOM_TRANSFORM
        elif pattern is not None and pattern.strategy is not None:
            masked = apply_strategy(value, pattern.strategy, state.config.hash_algorithm)
            applied = pattern.strategy.value
        else:
            masked, applied = state.resolver.mask_value(name, value, sensitivity)

        detected.append(DetectedField(
            path=path,
            sensitivity=sensitivity,
            value=value,
            strategy=applied,
            custom_pattern=pattern.name if pattern is not None else None,
        ))

        if applied == MaskingStrategy.REMOVE.value:
            return REMOVED_PLACEHOLDER if state.config.preserve_structure else _REMOVED
        return masked


def _is_container(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple))


def mask(data: Any, config: Optional[MaskingConfig] = None, **overrides: Any) -> MaskingResult:
    """
    One-shot convenience: mask data with a throwaway engine.

    Example:
        mask({"email": "john@gmail.com"}, env="production", pii_fields=["email"]).masked
        # {"email": "<hashed:...>"}
    """
    return MaskingEngine(config, **overrides).mask(data)

