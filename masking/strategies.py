"""
Strategy Applier - pure functions turning a value into its masked form.

    partial  -> reveal a small, shape-dependent part of the value
    full     -> fixed mask token
    hash     -> deterministic "<hashed:...>" token (same input, same token)
    remove   -> None; the engine drops the field or writes a placeholder
"""

import hashlib
import json
import logging
import re
from typing import Any, Callable, Optional

from .types import MaskingStrategy

logger = logging.getLogger(__name__)

FULL_MASK = "********"
REMOVED_PLACEHOLDER = "<removed>"
HASH_PREFIX_LENGTH = 16

_PHONE_SHAPE_RE = re.compile(r"^[+\-()\s\d]+$")
_NON_DIGIT_RE = re.compile(r"\D")


def _visible_prefix(text: str) -> str:
    return text[:min(2, len(text) // 3)]


def partial_mask(value: Any) -> str:
    """
    Reveal a small part of a string value.

    Example:
        partial_mask("john.doe@example.com")  # "jo****@example.com"
        partial_mask("+1 (555) 123-4567")     # "*******4567"
        partial_mask("EMP-123456")            # "EM****"
    """
    if not isinstance(value, str) or not value:
        return FULL_MASK

    if "@" in value:
        local, _, domain = value.partition("@")
        return f"{_visible_prefix(local)}****@{domain}"

    if _PHONE_SHAPE_RE.match(value):
        digits = _NON_DIGIT_RE.sub("", value)
        if len(digits) >= 4:
            return "*" * (len(digits) - 4) + digits[-4:]

    return f"{_visible_prefix(value)}****"


def full_mask(value: Any = None) -> str:
    return FULL_MASK


def hash_mask(value: Any, algorithm: str = "sha256") -> str:
    """
    Hash a value into a correlation-friendly token.

    Non-string values are canonicalised as sorted, compact JSON first, so
    equal structures always produce equal tokens.
    """
    if isinstance(value, str):
        text = value
    else:
        text = json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.new(algorithm, text.encode("utf-8")).hexdigest()
    return f"<hashed:{digest[:HASH_PREFIX_LENGTH]}>"


def remove_mask(value: Any = None) -> None:
    return None


def partial_mask_national_id(value: str) -> str:
    return "***-**-****"


def partial_mask_card(value: str) -> str:
    digits = _NON_DIGIT_RE.sub("", value)
    return f"****-****-****-{digits[-4:]}"


def partial_mask_phone(value: str) -> str:
    """Mask every digit but the last four, whatever separators the number uses."""
    digits = _NON_DIGIT_RE.sub("", value)
    if len(digits) < 4:
        return FULL_MASK
    return "*" * (len(digits) - 4) + digits[-4:]


def apply_strategy(
    value: Any,
    strategy: MaskingStrategy,
    hash_algorithm: str = "sha256",
    partial: Optional[Callable[[Any], str]] = None,
) -> Any:
    """
    Apply a masking strategy to a value.

    Args:
        value: The original value.
        strategy: Strategy to apply.
        hash_algorithm: hashlib algorithm name used by the hash strategy.
        partial: Optional shape-specific replacement for partial_mask
                 (used for embedded card / national-id / phone matches).

    Returns:
        The masked value, or None for the remove strategy.
    """
    if strategy == MaskingStrategy.PARTIAL:
        if not isinstance(value, str):
            return FULL_MASK
        return (partial or partial_mask)(value)
    if strategy == MaskingStrategy.FULL:
        return full_mask(value)
    if strategy == MaskingStrategy.HASH:
        return hash_mask(value, hash_algorithm)
    if strategy == MaskingStrategy.REMOVE:
        return remove_mask(value)
    return full_mask(value)


def run_transform(transform: Callable[[Any], Any], value: Any, source: str) -> Any:
    """
    Call a user transform function.

    A failing transform must not abort a mask() call: the failure is logged
    (without the value) and the full mask token is used instead.
    """
    try:
        return transform(value)
    except Exception as e:
        logger.warning(f"Transform for '{source}' failed ({type(e).__name__}), using full mask")
        return FULL_MASK
