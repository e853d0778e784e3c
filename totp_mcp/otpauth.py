"""Parse ``otpauth://totp/...`` URIs into TOTP parameters.

Format (Key Uri Format as used by authenticator apps)::

    otpauth://totp/ISSUER:ACCOUNT?secret=BASE32&algorithm=SHA1&digits=6&period=30&issuer=ISSUER

Only ``secret`` is required. Unknown query parameters are ignored.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
from enum import Enum
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    InvalidBase32,
    InvalidDigits,
    InvalidPeriod,
    InvalidUri,
    MissingSecret,
    UnsupportedAlgorithm,
    UnsupportedType,
)


MIN_DIGITS = 6
MAX_DIGITS = 10
DEFAULT_DIGITS = 6
DEFAULT_PERIOD = 30


class Algorithm(str, Enum):
    """HMAC digests allowed for TOTP."""

    SHA1 = "SHA1"
    SHA256 = "SHA256"
    SHA512 = "SHA512"

    @property
    def digestmod(self) -> Callable[..., Any]:
        return {
            Algorithm.SHA1: hashlib.sha1,
            Algorithm.SHA256: hashlib.sha256,
            Algorithm.SHA512: hashlib.sha512,
        }[self]


class TotpParams(BaseModel):
    """Parameters needed to compute TOTP codes.

    Attributes:
        secret: Raw shared secret bytes (already base32-decoded).
        algorithm: HMAC digest.
        digits: Length of the rendered code.
        period_seconds: Length of one time step.
        issuer: Display-only issuer name.
        label: Display-only account label.
    """

    model_config = ConfigDict(frozen=True)

    secret: bytes
    algorithm: Algorithm = Algorithm.SHA1
    digits: int = Field(default=DEFAULT_DIGITS, ge=MIN_DIGITS, le=MAX_DIGITS)
    period_seconds: int = Field(default=DEFAULT_PERIOD, gt=0)
    issuer: Optional[str] = None
    label: Optional[str] = None


def decode_base32(data: str) -> bytes:
    """Decode a base32 secret, tolerating missing padding, spaces and lowercase.

    Raises:
        InvalidBase32: if the value is empty or not RFC 4648 base32.
    """
    value = data.strip().replace(" ", "").rstrip("=").upper()
    if not value:
        raise InvalidBase32("empty secret")
    # Re-pad to a full 8-character quantum
    missing = (-len(value)) % 8
    try:
        return base64.b32decode(value + "=" * missing)
    except (binascii.Error, ValueError) as exc:
        raise InvalidBase32(str(exc)) from exc


def _parse_algorithm(raw: Optional[str]) -> Algorithm:
    if raw is None:
        return Algorithm.SHA1
    try:
        return Algorithm(raw.strip().upper())
    except ValueError as exc:
        raise UnsupportedAlgorithm(raw) from exc


def _parse_decimal(raw: str) -> Optional[int]:
    """Plain ASCII decimal only; no sign, underscores or other digit scripts."""
    value = raw.strip()
    if not value or not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def _parse_digits(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_DIGITS
    digits = _parse_decimal(raw)
    if digits is None or not MIN_DIGITS <= digits <= MAX_DIGITS:
        raise InvalidDigits(raw)
    return digits


def _parse_period(raw: Optional[str]) -> int:
    if raw is None:
        return DEFAULT_PERIOD
    period = _parse_decimal(raw)
    if period is None or period <= 0:
        raise InvalidPeriod(raw)
    return period


def _split_label(path: str, issuer_param: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Return (issuer, label) from the URI path and ``issuer`` parameter."""
    label = unquote(path.lstrip("/")).strip() or None
    issuer = issuer_param.strip() if issuer_param and issuer_param.strip() else None
    if label and ":" in label:
        prefix, account = label.split(":", 1)
        issuer = issuer or prefix.strip() or None
        label = account.strip() or None
    return issuer, label


def parse(uri: str) -> TotpParams:
    """Parse an ``otpauth://totp/...`` URI.

    Args:
        uri: The otpauth URI string.

    Returns:
        Immutable TotpParams.

    Raises:
        TotpParseError: one of its subclasses describing what is wrong.
    """
    try:
        parts = urlsplit(uri.strip())
    except ValueError as exc:
        raise InvalidUri(str(exc)) from exc
    if parts.scheme.lower() != "otpauth":
        raise InvalidUri(parts.scheme or uri)
    otp_type = parts.netloc.lower()
    if otp_type != "totp":
        raise UnsupportedType(otp_type or "<empty>")

    # Keys are matched case-insensitively; the first occurrence wins
    query: dict[str, str] = {}
    for key, values in parse_qs(parts.query).items():
        query.setdefault(key.lower(), values[0])

    raw_secret = query.get("secret")
    if raw_secret is None or not raw_secret.strip():
        raise MissingSecret()

    algorithm = _parse_algorithm(query.get("algorithm"))
    digits = _parse_digits(query.get("digits"))
    period = _parse_period(query.get("period"))
    secret = decode_base32(raw_secret)
    issuer, label = _split_label(parts.path, query.get("issuer"))

    return TotpParams(
        secret=secret,
        algorithm=algorithm,
        digits=digits,
        period_seconds=period,
        issuer=issuer,
        label=label,
    )


def params_from_base32(
    base32_secret: str,
    *,
    algorithm: Algorithm = Algorithm.SHA1,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_PERIOD,
) -> TotpParams:
    """Build params from a bare base32 seed using the given settings."""
    return TotpParams(
        secret=decode_base32(base32_secret),
        algorithm=algorithm,
        digits=digits,
        period_seconds=period,
    )


def is_otpauth_uri(value: str) -> bool:
    """Whether a stored field value looks like an otpauth URI."""
    return value.strip().lower().startswith("otpauth://")
