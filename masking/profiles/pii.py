"""
PII Detection Profile - personally identifiable information.

Patterns covered:
    - Email addresses
    - Phone numbers (international and local formats, 7+ digits)
    - National identification numbers (US SSN shape)
    - Payment card numbers (16 digits, optional separators)
    - IPv4 addresses

Embedded (free-text) detectors run in the order email, payment card,
national id, phone so that the more specific shapes claim their text
before the permissive phone detector sees it.
"""

import re

from scrubadub.filth import CreditCardFilth, EmailFilth, PhoneFilth, SocialSecurityNumberFilth

from ..base_profile import DetectionPattern, DetectionProfile, EmbeddedDetector
from ..strategies import partial_mask_card, partial_mask_national_id, partial_mask_phone
from ..types import SensitivityClass

COMMON_PII_FIELDS = [
    "email",
    "emailAddress",
    "phone",
    "phoneNumber",
    "mobile",
    "ssn",
    "socialSecurityNumber",
    "creditCard",
    "cardNumber",
    "password",
    "secret",
    "token",
    "apiKey",
    "accessToken",
    "refreshToken",
    "address",
    "streetAddress",
    "zipCode",
    "postalCode",
    "dateOfBirth",
    "dob",
    "birthDate",
    "ipAddress",
    "ip",
]

# Checked in order; the first full match wins
PII_PATTERNS = [
    DetectionPattern(
        name="email",
        pattern=re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'),
        sensitivity=SensitivityClass.PII,
        description="Email address",
    ),

    # At least 7 digits, so short codes and years are not phone numbers
    DetectionPattern(
        name="phone",
        pattern=re.compile(
            r'^(?=(?:\D*\d){7})\+?\(?[0-9]{1,4}\)?[-\s.]?\(?[0-9]{1,4}\)?[-\s.]?[0-9]{1,9}$'
        ),
        sensitivity=SensitivityClass.PII,
        description="Phone number",
    ),

    DetectionPattern(
        name="ssn",
        pattern=re.compile(r'^\d{3}-?\d{2}-?\d{4}$'),
        sensitivity=SensitivityClass.PII,
        description="US Social Security Number",
    ),

    DetectionPattern(
        name="credit_card",
        pattern=re.compile(r'^\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}$'),
        sensitivity=SensitivityClass.PII,
        description="Payment card number",
    ),

    DetectionPattern(
        name="ipv4",
        pattern=re.compile(
            r'^(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}'
            r'(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)$'
        ),
        sensitivity=SensitivityClass.PII,
        description="IPv4 address",
    ),
]


class EmbeddedEmailDetector(EmbeddedDetector):
    name = "embedded_email"
    filth_cls = EmailFilth
    regex = re.compile(r'\b[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}\b')


class EmbeddedCardDetector(EmbeddedDetector):
    name = "embedded_credit_card"
    filth_cls = CreditCardFilth
    regex = re.compile(r'\b\d{4}[-\s]?\d{4}[-\s]?\d{4}[-\s]?\d{4}\b')
    partial = staticmethod(partial_mask_card)


class EmbeddedNationalIdDetector(EmbeddedDetector):
    name = "embedded_national_id"
    filth_cls = SocialSecurityNumberFilth
    regex = re.compile(r'\b\d{3}-\d{2}-\d{4}\b')
    partial = staticmethod(partial_mask_national_id)


class EmbeddedPhoneDetector(EmbeddedDetector):
    name = "embedded_phone"
    filth_cls = PhoneFilth
    regex = re.compile(
        r'(?<![\w+-])\+?\(?\d{1,4}\)?[-\s.]?\(?\d{1,4}\)?[-\s.]?\d{4,}\b'
    )
    partial = staticmethod(partial_mask_phone)
    min_digits = 7


class PiiProfile(DetectionProfile):
    """
    Built-in profile for personally identifiable information.

    Value patterns are anchored: "john@example.com" is an email value,
    "mail john@example.com" is not (it is left to embedded scanning).
    """

    @property
    def name(self) -> str:
        return "pii"

    @property
    def description(self) -> str:
        return "Personally identifiable information (email, phone, national id, payment card, IP address)"

    @property
    def sensitivity(self) -> SensitivityClass:
        return SensitivityClass.PII

    def get_field_names(self) -> list[str]:
        return list(COMMON_PII_FIELDS)

    def get_value_patterns(self) -> list[DetectionPattern]:
        return list(PII_PATTERNS)

    def get_scrubadub_detectors(self) -> list[EmbeddedDetector]:
        return [
            EmbeddedEmailDetector(),
            EmbeddedCardDetector(),
            EmbeddedNationalIdDetector(),
            EmbeddedPhoneDetector(),
        ]
