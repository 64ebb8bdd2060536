"""
Tests for the masking strategies.

Tests cover:
- Partial masking of emails, phone numbers and generic strings
- Full masking and removal
- Hash tokens (determinism, algorithm choice, structured values)
- Shape-preserving partials used by embedded scanning
- Transform failures
"""

import hashlib
import logging

from masking.strategies import (
    FULL_MASK,
    apply_strategy,
    full_mask,
    hash_mask,
    partial_mask,
    partial_mask_card,
    partial_mask_national_id,
    partial_mask_phone,
    remove_mask,
    run_transform,
)
from masking.types import MaskingStrategy


def expected_hash(text, algorithm="sha256"):
    return f"<hashed:{hashlib.new(algorithm, text.encode('utf-8')).hexdigest()[:16]}>"


class TestPartialMask:
    """Test suite for the partial strategy."""

    def test_email_keeps_domain(self):
        """Should reveal at most two characters of the local part and the whole domain."""
        assert partial_mask("john.doe@example.com") == "jo****@example.com"

    def test_short_email_local_part(self):
        """Should reveal a single character of a short local part."""
        assert partial_mask("john@gmail.com") == "j****@gmail.com"

    def test_phone_reveals_last_four_digits(self):
        """Should mask every digit but the last four, dropping separators."""
        assert partial_mask("+1 (555) 123-4567") == "*******4567"
        assert partial_mask("+919999999999") == "********9999"

    def test_generic_string(self):
        """Should keep a short prefix of other strings."""
        assert partial_mask("EMP-123456") == "EM****"
        assert partial_mask("PAT-12345") == "PA****"

    def test_very_short_string_reveals_nothing(self):
        assert partial_mask("ab") == "****"

    def test_empty_and_non_string(self):
        """Should fall back to the full mask token."""
        assert partial_mask("") == FULL_MASK
        assert partial_mask(12345) == FULL_MASK
        assert partial_mask(None) == FULL_MASK


class TestHashMask:
    """Test suite for the hash strategy."""

    def test_token_format(self):
        """Should produce a 16 hex character token."""
        token = hash_mask("john@gmail.com")
        assert token == expected_hash("john@gmail.com")
        assert token.startswith("<hashed:") and token.endswith(">")
        assert len(token) == len("<hashed:>") + 16

    def test_deterministic(self):
        """Same input, same token; different input, different token."""
        assert hash_mask("a@b.io") == hash_mask("a@b.io")
        assert hash_mask("a@b.io") != hash_mask("c@d.io")

    def test_configured_algorithm(self):
        assert hash_mask("secret", "md5") == expected_hash("secret", "md5")
        assert hash_mask("secret", "md5") != hash_mask("secret", "sha256")

    def test_structured_values_are_canonicalised(self):
        """Key order should not change the token of a mapping."""
        assert hash_mask({"b": 1, "a": 2}) == hash_mask({"a": 2, "b": 1})
        assert hash_mask(42) == expected_hash("42")


class TestOtherStrategies:
    """Test suite for full, remove and apply_strategy."""

    def test_full_mask(self):
        assert full_mask("anything") == FULL_MASK == "********"

    def test_remove_mask(self):
        assert remove_mask("anything") is None

    def test_apply_strategy_dispatch(self):
        assert apply_strategy("EMP-123456", MaskingStrategy.PARTIAL) == "EM****"
        assert apply_strategy("EMP-123456", MaskingStrategy.FULL) == FULL_MASK
        assert apply_strategy("EMP-123456", MaskingStrategy.HASH) == expected_hash("EMP-123456")
        assert apply_strategy("EMP-123456", MaskingStrategy.REMOVE) is None

    def test_partial_on_non_string_is_full(self):
        assert apply_strategy(1234567890, MaskingStrategy.PARTIAL) == FULL_MASK
        assert apply_strategy({"a": 1}, MaskingStrategy.PARTIAL) == FULL_MASK

    def test_custom_partial_renderer(self):
        """Should use the shape-specific renderer when one is given."""
        masked = apply_strategy("4111 1111 1111 1234", MaskingStrategy.PARTIAL, partial=partial_mask_card)
        assert masked == "****-****-****-1234"


class TestShapePreservingPartials:
    """Test suite for partials of embedded matches."""

    def test_card(self):
        assert partial_mask_card("4111-1111-1111-9876") == "****-****-****-9876"

    def test_national_id(self):
        assert partial_mask_national_id("123-45-6789") == "***-**-****"

    def test_phone(self):
        assert partial_mask_phone("555-123-4567") == "******4567"
        assert partial_mask_phone("12") == FULL_MASK


class TestRunTransform:
    """Test suite for user transforms."""

    def test_returns_transform_result(self):
        assert run_transform(lambda v: v[::-1], "abc", "reverse") == "cba"

    def test_failing_transform_falls_back_to_full_mask(self, caplog):
        """Should log a warning without the value and return the full mask."""
        def broken(value):
            raise RuntimeError("boom")

        with caplog.at_level(logging.WARNING, logger="masking.strategies"):
            result = run_transform(broken, "4111111111111234", "card")

        assert result == FULL_MASK
        assert "card" in caplog.text
        assert "4111111111111234" not in caplog.text
