"""Errors raised while parsing otpauth URIs."""

from __future__ import annotations


class TotpParseError(ValueError):
    """Base class for malformed TOTP configuration."""

    message = "invalid TOTP configuration"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class InvalidUri(TotpParseError):
    message = "not an otpauth URI"


class UnsupportedType(TotpParseError):
    message = "unsupported OTP type"


class MissingSecret(TotpParseError):
    message = "missing secret parameter"


class InvalidBase32(TotpParseError):
    message = "secret is not valid base32"


class UnsupportedAlgorithm(TotpParseError):
    message = "unsupported algorithm"


class InvalidDigits(TotpParseError):
    message = "digits must be an integer between 6 and 10"


class InvalidPeriod(TotpParseError):
    message = "period must be a positive integer"
