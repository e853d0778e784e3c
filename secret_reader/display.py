"""View models for rendering secrets and their TOTP codes.

Any field whose value is an ``otpauth://`` URI gets a live code. A field
that fails to parse is flagged on its own; other fields and secrets are
unaffected.
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from pydantic import BaseModel, Field

from totp_mcp.errors import TotpParseError
from totp_mcp.generator import generate
from totp_mcp.otpauth import is_otpauth_uri, parse


logger = logging.getLogger(__name__)

INVALID_TOTP = "invalid TOTP configuration"


class TotpView(BaseModel):
    code: str
    seconds_remaining: int
    period: int
    digits: int
    algorithm: str
    issuer: Optional[str] = None
    label: Optional[str] = None


class FieldView(BaseModel):
    key: str
    value: str
    totp: Optional[TotpView] = None
    totp_error: Optional[str] = None


class SecretView(BaseModel):
    """A secret (or webhook entry) ready for display."""

    name: str
    fields: list[FieldView] = Field(default_factory=list)
    error: Optional[str] = None


def build_field_view(secret_name: str, key: str, value: str, now: float) -> FieldView:
    if not is_otpauth_uri(value):
        return FieldView(key=key, value=value)
    try:
        params = parse(value)
    except TotpParseError as exc:
        # Log the reason only; the URI carries the seed
        logger.warning("Invalid TOTP field %s/%s: %s", secret_name, key, exc.message)
        return FieldView(key=key, value=value, totp_error=INVALID_TOTP)
    result = generate(params, now)
    return FieldView(
        key=key,
        value=value,
        totp=TotpView(
            code=result.code,
            seconds_remaining=result.seconds_remaining(now),
            period=params.period_seconds,
            digits=params.digits,
            algorithm=params.algorithm.value,
            issuer=params.issuer,
            label=params.label,
        ),
    )


def build_secret_view(name: str, data: Mapping[str, str], now: float) -> SecretView:
    """Build a view with fields sorted by key."""
    return SecretView(
        name=name,
        fields=[build_field_view(name, key, data[key], now) for key in sorted(data)],
    )


def collect_codes(views: list[SecretView]) -> dict[str, dict[str, dict[str, object]]]:
    """Return ``{secret: {field: {code, seconds_remaining}}}`` for TOTP fields only."""
    codes: dict[str, dict[str, dict[str, object]]] = {}
    for view in views:
        entry = {
            f.key: {"code": f.totp.code, "seconds_remaining": f.totp.seconds_remaining}
            for f in view.fields
            if f.totp is not None
        }
        if entry:
            codes[view.name] = entry
    return codes
