from __future__ import annotations

import os
import sys

import pytest


PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Minimal environment for module imports during tests
os.environ.setdefault("AWS_REGION", "us-east-1")

# Base32 of the RFC 6238 SHA1 seed "12345678901234567890"
RFC_SHA1_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


@pytest.fixture
def rfc_uri() -> str:
    return f"otpauth://totp/ACME:alice@example.com?secret={RFC_SHA1_SECRET}&digits=8&period=30"
