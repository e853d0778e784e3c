"""TOTP engine and MCP package.

Parses otpauth URIs, computes RFC 6238 codes, and provides a minimal MCP
server that returns the current code for a URI or a stored secret.
"""

from .errors import TotpParseError
from .generator import CodeResult, current_code, generate, hotp
from .otpauth import Algorithm, TotpParams, parse

__all__ = [
    "Algorithm",
    "CodeResult",
    "TotpParams",
    "TotpParseError",
    "current_code",
    "generate",
    "hotp",
    "mcp_server",
    "parse",
]
