"""
Tests for the Detector and the built-in detection profiles.

Tests cover:
- Field name splitting and word-boundary matching
- Built-in value patterns (PII and PHI)
- Custom pattern registry
- Embedded scanning of free text
- Profile loading/unloading
"""

import hashlib
import logging

import pytest

from masking import ConfigurationError, CustomPattern, Detector, MaskingStrategy, SensitivityClass
from masking.detector import FieldNameMatcher, split_words
from masking.profiles import PhiProfile, PiiProfile


class TestSplitWords:
    """Test suite for field name splitting."""

    @pytest.mark.parametrize("name,words", [
        ("ipAddress", ("ip", "address")),
        ("ip_address", ("ip", "address")),
        ("IPAddress", ("ip", "address")),
        ("patient-id", ("patient", "id")),
        ("user.email", ("user", "email")),
        ("email1", ("email1",)),
        ("", ()),
    ])
    def test_split(self, name, words):
        assert split_words(name) == words


class TestFieldNameClassification:
    """Test suite for word-boundary field name matching."""

    @pytest.mark.parametrize("name", ["email", "userEmail", "ipAddress", "ip_address", "phone_number", "SSN"])
    def test_pii_names(self, name):
        assert Detector().classify_field_name(name) == SensitivityClass.PII

    @pytest.mark.parametrize("name", ["patientId", "patient_id", "mrn", "labResults"])
    def test_phi_names(self, name):
        assert Detector().classify_field_name(name) == SensitivityClass.PHI

    @pytest.mark.parametrize("name", ["description", "subscription", "transcription", "email1", "name", "zip"])
    def test_substrings_do_not_match(self, name):
        """Should never match a catalog entry hidden inside a longer word."""
        assert Detector().classify_field_name(name) is None

    def test_joined_entry_matches_unsplit_name(self):
        """'phonenumber' has no word boundary but equals the joined entry."""
        matcher = FieldNameMatcher(["phoneNumber"])
        assert matcher.matches("phonenumber") is True
        assert matcher.matches("phone") is False


class TestValueClassification:
    """Test suite for built-in value patterns."""

    @pytest.mark.parametrize("value", [
        "john@example.com",
        "+919999999999",
        "555-123-4567",
        "123-45-6789",
        "4111 1111 1111 1234",
        "192.168.1.1",
    ])
    def test_pii_values(self, value):
        assert Detector().classify_value(value) == SensitivityClass.PII

    @pytest.mark.parametrize("value", ["PAT-12345", "pt_42", "MRN-001", "HP-9"])
    def test_phi_values(self, value):
        assert Detector().classify_value(value) == SensitivityClass.PHI

    @pytest.mark.parametrize("value", ["hello", "2024", "mail john@example.com", 5551234567, None])
    def test_non_sensitive_values(self, value):
        """Only whole string values are classified."""
        assert Detector().classify_value(value) is None

    def test_name_wins_over_value(self):
        assert Detector().classify("patientId", "john@example.com") == SensitivityClass.PHI

    def test_auto_detect_off_skips_built_ins(self):
        detector = Detector(auto_detect=False)
        assert detector.classify("email", "john@example.com") is None


class TestCustomPatternRegistry:
    """Test suite for custom pattern registration."""

    def employee_pattern(self, **kwargs):
        return CustomPattern(name="employee_id", pattern=r"^EMP-\d{6}$", sensitivity="pii", **kwargs)

    def test_add_and_classify(self):
        detector = Detector()
        detector.add_custom_pattern(self.employee_pattern())

        assert detector.classify("ref", "EMP-123456") == SensitivityClass.PII
        assert detector.classify_custom_value_exact(" EMP-123456 ").name == "employee_id"
        assert detector.classify_custom_value_exact("id EMP-123456") is None

    def test_custom_patterns_apply_without_auto_detect(self):
        detector = Detector(custom_patterns=[self.employee_pattern()], auto_detect=False)
        assert detector.classify("ref", "EMP-123456") == SensitivityClass.PII

    def test_add_from_mapping(self):
        detector = Detector()
        added = detector.add_custom_pattern({"name": "api", "pattern": r"^sk_[a-z0-9]+$"})

        assert added.sensitivity == SensitivityClass.CUSTOM
        assert [p.name for p in detector.get_custom_patterns()] == ["api"]

    def test_duplicate_name_rejected(self):
        detector = Detector(custom_patterns=[self.employee_pattern()])
        with pytest.raises(ConfigurationError, match="already exists"):
            detector.add_custom_pattern(self.employee_pattern(strategy="full"))

    def test_remove_and_clear(self):
        detector = Detector(custom_patterns=[self.employee_pattern()])

        assert detector.remove_custom_pattern("employee_id") is True
        assert detector.remove_custom_pattern("employee_id") is False
        assert detector.classify("ref", "EMP-123456") is None

        detector.add_custom_pattern(self.employee_pattern())
        detector.clear_custom_patterns()
        assert detector.get_custom_patterns() == []

    def test_registration_order_is_priority(self):
        detector = Detector(custom_patterns=[
            CustomPattern(name="first", pattern=r"^ID-\d+$", sensitivity="phi"),
            CustomPattern(name="second", pattern=r"^ID-\d{3}$", sensitivity="pii"),
        ])
        assert detector.classify_custom_value_exact("ID-123").name == "first"

    def test_malformed_regex_rejected(self):
        with pytest.raises(ConfigurationError, match="Malformed"):
            CustomPattern(name="broken", pattern=r"^(EMP$")


class TestEmbeddedScanning:
    """Test suite for masking sensitive substrings."""

    def test_email_partial(self):
        text = "this is user's email testing@gmail.com"
        masked = Detector().scan_and_mask_embedded(text, MaskingStrategy.PARTIAL)
        assert masked == "this is user's email te****@gmail.com"

    def test_email_full(self):
        masked = Detector().scan_and_mask_embedded("mail me: jane@example.com", MaskingStrategy.FULL)
        assert masked == "mail me: ********"

    def test_email_hash(self):
        masked = Detector().scan_and_mask_embedded("mail jane@example.com", MaskingStrategy.HASH)
        digest = hashlib.sha256(b"jane@example.com").hexdigest()[:16]
        assert masked == f"mail <hashed:{digest}>"

    def test_remove_uses_placeholder(self):
        masked = Detector().scan_and_mask_embedded("mail jane@example.com", MaskingStrategy.REMOVE)
        assert masked == "mail <removed>"

    def test_phone_partial(self):
        masked = Detector().scan_and_mask_embedded("call +919999999999 now", MaskingStrategy.PARTIAL)
        assert masked == "call ********9999 now"

    def test_card_is_not_taken_for_a_phone(self):
        masked = Detector().scan_and_mask_embedded("card 4111 1111 1111 1234 used", MaskingStrategy.PARTIAL)
        assert masked == "card ****-****-****-1234 used"

    def test_national_id_partial(self):
        masked = Detector().scan_and_mask_embedded("ssn 123-45-6789", MaskingStrategy.PARTIAL)
        assert masked == "ssn ***-**-****"

    def test_multiple_matches_keep_surrounding_text(self):
        text = "a@b.io wrote to c@d.io"
        masked = Detector().scan_and_mask_embedded(text, MaskingStrategy.FULL)
        assert masked == "******** wrote to ********"

    def test_clean_text_unchanged(self):
        detector = Detector()
        assert detector.scan_and_mask_embedded("nothing to see", MaskingStrategy.FULL) == "nothing to see"
        assert detector.scan_and_mask_embedded("", MaskingStrategy.FULL) == ""
        assert detector.scan_and_mask_embedded(42, MaskingStrategy.FULL) == 42

    def test_custom_pattern_claims_span_first(self):
        detector = Detector(custom_patterns=[
            CustomPattern(name="employee_id", pattern=r"^EMP-\d{6}$", sensitivity="pii", strategy="full"),
        ])
        masked = detector.scan_and_mask_embedded("employee EMP-123456 logged in", MaskingStrategy.PARTIAL)
        assert masked == "employee ******** logged in"

    def test_custom_transform_in_text(self):
        detector = Detector(custom_patterns=[
            CustomPattern(
                name="account",
                pattern=r"^ACC-\d{8}$",
                transform=lambda value: f"ACC-*****{value[-3:]}",
            ),
        ])
        masked = detector.scan_and_mask_embedded("moved to ACC-98765432", MaskingStrategy.FULL)
        assert masked == "moved to ACC-*****432"

    def test_custom_pattern_without_strategy_uses_default(self):
        detector = Detector(custom_patterns=[CustomPattern(name="ticket", pattern=r"TCK-\d+")])
        masked = detector.scan_and_mask_embedded("see TCK-991", MaskingStrategy.FULL)
        assert masked == "see ********"


class TestProfiles:
    """Test suite for profile loading."""

    def test_default_profiles(self):
        assert Detector().list_profiles() == ["phi", "pii"]

    def test_unload_profile(self):
        detector = Detector()
        assert detector.unload_profile("phi") is True
        assert detector.unload_profile("phi") is False
        assert detector.classify_value("PAT-12345") is None

    def test_explicit_profiles(self):
        detector = Detector(profiles=[PiiProfile()])
        assert detector.list_profiles() == ["pii"]
        assert detector.classify_field_name("patientId") is None

        detector.load_profile(PhiProfile())
        assert detector.classify_field_name("patientId") == SensitivityClass.PHI

    def test_built_in_order_survives_reload(self):
        """PHI profiles are consulted before PII whatever order they were loaded in."""
        detector = Detector(profiles=[PiiProfile()])
        detector.load_profile(PhiProfile())
        assert detector.list_profiles() == ["phi", "pii"]

        detector = Detector()
        detector.load_profile(PhiProfile())
        assert detector.list_profiles() == ["phi", "pii"]

    def test_default_profiles_load_quietly(self, caplog):
        with caplog.at_level(logging.INFO, logger="masking.detector"):
            Detector()
        assert caplog.records == []

    def test_profile_repr(self):
        assert repr(PiiProfile()) == "<DetectionProfile: pii>"
