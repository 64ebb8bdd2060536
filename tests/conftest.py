"""
Pytest configuration and shared fixtures for the masking engine tests.

Engines are built per test so that custom pattern registries never leak
between tests.
"""

import os
import sys

import pytest

# Add parent directory to path for package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

MASKING_ENV_VARS = (
    "MASKING_ENV",
    "MASKING_HASH_ALGORITHM",
    "MASKING_DETECT_PII",
    "MASKING_MASK_STRING_VALUES",
    "MASKING_PRESERVE_STRUCTURE",
    "MASKING_MAX_DEPTH",
)


@pytest.fixture(autouse=True)
def clean_masking_env(monkeypatch):
    """
    Remove MASKING_* variables from the environment.
    This runs automatically before each test.
    """
    for name in MASKING_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight to os.environ
    for name in MASKING_ENV_VARS:
        os.environ.pop(name, None)


@pytest.fixture
def dev_engine():
    """Engine in the development environment (partial masking of PII)."""
    from masking import MaskingEngine

    return MaskingEngine(env="development")


@pytest.fixture
def sample_record():
    """A log record mixing PII, PHI and harmless fields."""
    return {
        "email": "john@gmail.com",
        "phone": "+919999999999",
        "patientId": "PAT-12345",
        "name": "John Doe",
        "description": "this is user's email testing@gmail.com",
    }


@pytest.fixture
def nested_record():
    """A deeply nested record with sensitive values at several levels."""
    return {
        "requestId": "req-42",
        "user": {
            "id": 7,
            "contacts": [
                {"type": "work", "email": "jane.doe@example.com"},
                {"type": "home", "phone": "555-123-4567"},
            ],
        },
        "tags": ["audit", "jane.doe@example.com"],
        "meta": {"active": True, "score": 1.5, "note": None},
    }
