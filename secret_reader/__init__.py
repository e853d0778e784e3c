"""
Secret Reader.

Shows configured secrets and live TOTP codes derived from the otpauth URIs
stored in them.
"""

from __future__ import annotations

from dotenv import load_dotenv

# Load local env vars when present. Keep imports lightweight to avoid side-effects
# during package import in unit tests.
load_dotenv()

__version__ = "0.1.0"
__all__: list[str] = []
