"""
Rule Resolver - picks the masking strategy for a classified field.

Resolution order:
1. An explicit MaskingRule matching the field name (exact, case-insensitive,
   or regex) wins regardless of the field's sensitivity class.
2. Otherwise the environment mapping of the sensitivity class is used,
   falling back to the defaults below for missing environments.
3. Fields of the "custom" class without a rule are fully masked.
"""

from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional

from .strategies import apply_strategy, run_transform
from .types import (
    CUSTOM_TRANSFORM,
    Environment,
    MaskingRule,
    MaskingStrategy,
    SensitivityClass,
)

DEFAULT_PII_ENVIRONMENT_MAPPING: Mapping[Environment, MaskingStrategy] = MappingProxyType({
    Environment.DEVELOPMENT: MaskingStrategy.PARTIAL,
    Environment.STAGING: MaskingStrategy.FULL,
    Environment.PRODUCTION: MaskingStrategy.HASH,
})

DEFAULT_PHI_ENVIRONMENT_MAPPING: Mapping[Environment, MaskingStrategy] = MappingProxyType({
    Environment.DEVELOPMENT: MaskingStrategy.FULL,
    Environment.STAGING: MaskingStrategy.FULL,
    Environment.PRODUCTION: MaskingStrategy.HASH,
})

_DEFAULT_MAPPINGS = {
    SensitivityClass.PII: DEFAULT_PII_ENVIRONMENT_MAPPING,
    SensitivityClass.PHI: DEFAULT_PHI_ENVIRONMENT_MAPPING,
}


def environment_strategy(
    sensitivity: SensitivityClass,
    env: Environment,
    pii_mapping: Optional[Mapping[Environment, MaskingStrategy]] = None,
    phi_mapping: Optional[Mapping[Environment, MaskingStrategy]] = None,
) -> MaskingStrategy:
    """Environment-driven default strategy for a sensitivity class."""
    if sensitivity == SensitivityClass.CUSTOM:
        return MaskingStrategy.FULL

    mapping = pii_mapping if sensitivity == SensitivityClass.PII else phi_mapping
    if mapping and env in mapping:
        return mapping[env]
    return _DEFAULT_MAPPINGS[sensitivity][env]


class RuleResolver:
    """
    Resolves masking strategies from per-field rules and environment mappings.

    Example:
        resolver = RuleResolver(
            rules=[MaskingRule("ssn", MaskingStrategy.REMOVE)],
            env=Environment.DEVELOPMENT,
        )
        resolver.resolve("ssn", SensitivityClass.PII)    # MaskingStrategy.REMOVE
        resolver.resolve("email", SensitivityClass.PII)  # MaskingStrategy.PARTIAL
    """

    def __init__(
        self,
        rules: Iterable[MaskingRule] = (),
        env: Environment = Environment.PRODUCTION,
        hash_algorithm: str = "sha256",
        pii_mapping: Optional[Mapping[Environment, MaskingStrategy]] = None,
        phi_mapping: Optional[Mapping[Environment, MaskingStrategy]] = None,
    ):
        self._rules = list(rules)
        self.env = env
        self.hash_algorithm = hash_algorithm
        self._pii_mapping = pii_mapping
        self._phi_mapping = phi_mapping

    @property
    def rules(self) -> list[MaskingRule]:
        return list(self._rules)

    def find_rule(self, field_name: Optional[str]) -> Optional[MaskingRule]:
        if field_name is None:
            return None
        for rule in self._rules:
            if rule.matches(field_name):
                return rule
        return None

    def default_strategy(self, sensitivity: SensitivityClass) -> MaskingStrategy:
        """Strategy from the environment mapping only, ignoring field rules."""
        return environment_strategy(sensitivity, self.env, self._pii_mapping, self._phi_mapping)

    def resolve(self, field_name: Optional[str], sensitivity: Optional[SensitivityClass]) -> MaskingStrategy:
        rule = self.find_rule(field_name)
        if rule is not None:
            return rule.strategy
        if sensitivity is None:
            return MaskingStrategy.FULL
        return self.default_strategy(sensitivity)

    def apply(self, value: Any, strategy: MaskingStrategy) -> Any:
        return apply_strategy(value, strategy, self.hash_algorithm)

    def mask_value(
        self,
        field_name: Optional[str],
        value: Any,
        sensitivity: Optional[SensitivityClass],
    ) -> tuple[Any, str]:
        """
        Mask a value for a field.

        Returns:
            A tuple of (masked_value, applied):
            - masked_value: The masked value (None for the remove strategy)
            - applied: The strategy value used, or "custom" when the matching
                       rule's transform produced the value

        A rule whose strategy is remove always removes; its transform is not run.
        """
        rule = self.find_rule(field_name)
        if rule is not None and rule.strategy == MaskingStrategy.REMOVE:
            return None, MaskingStrategy.REMOVE.value
        if rule is not None and rule.transform is not None:
            return run_transform(rule.transform, value, f"rule {rule.field.value}"), CUSTOM_TRANSFORM

        strategy = self.resolve(field_name, sensitivity)
        return self.apply(value, strategy), strategy.value
