from __future__ import annotations

from typing import Dict, Optional

from fastmcp import FastMCP
from pydantic import BaseModel, Field

from secret_reader.secrets import fetch_secret

from .generator import current_code
from .otpauth import TotpParams, is_otpauth_uri, params_from_base32, parse


mcp = FastMCP("TOTP MCP Server")


class GetTotpCodeRequest(BaseModel):
    """Request to fetch a TOTP code for a stored secret.

    Attributes:
        secret_name: Name of the AWS Secrets Manager secret. Its value may be
            an otpauth URI, a raw base32 secret, or a JSON object whose
            ``field`` holds either of those.
        field: Field holding the TOTP configuration when the secret is a JSON
            object. Defaults to "totp"; a plain secret is read from "value".
        namespace: Optional secret name prefix.
        secret_region: Optional AWS region for the secret.
    """

    secret_name: str = Field(..., min_length=1)
    field: str = Field(default="totp")
    namespace: Optional[str] = Field(default=None)
    secret_region: Optional[str] = Field(default=None)


def _params_for_value(value: str) -> TotpParams:
    """Parse an otpauth URI, or treat the value as a bare base32 secret."""
    if is_otpauth_uri(value):
        return parse(value)
    return params_from_base32(value)


def totp_for_uri(uri: str, now: Optional[int] = None) -> Dict[str, object]:
    """Return ``{code, seconds_remaining}`` for an otpauth URI."""
    return current_code(parse(uri), now)


def totp_for_secret(request: GetTotpCodeRequest, now: Optional[int] = None) -> Dict[str, object]:
    """Read a secret and return ``{code, seconds_remaining}`` for its TOTP field.

    Raises:
        KeyError: if the secret has neither ``request.field`` nor ``value``.
    """
    fields = fetch_secret(request.secret_name, request.namespace, request.secret_region)
    value = fields.get(request.field, fields.get("value"))
    if value is None:
        raise KeyError(f"Secret {request.secret_name} has no field {request.field!r}")
    return current_code(_params_for_value(value), now)


@mcp.tool(
    name="get_totp_code",
    description="Read a TOTP configuration from AWS Secrets Manager and return the current code.",
)
def get_totp_code(request: GetTotpCodeRequest) -> Dict[str, object]:
    """Return the current TOTP code for the secret in Secrets Manager."""
    return totp_for_secret(request)


@mcp.tool(
    name="generate_totp_code",
    description="Generate the current code for an otpauth:// URI.",
)
def generate_totp_code(uri: str) -> Dict[str, object]:
    """Return the current TOTP code for an otpauth URI."""
    return totp_for_uri(uri)


if __name__ == "__main__":
    mcp.run(transport="stdio")
