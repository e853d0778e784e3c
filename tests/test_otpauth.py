from __future__ import annotations

import pytest
from pydantic import ValidationError

from totp_mcp.errors import (
    InvalidBase32,
    InvalidDigits,
    InvalidPeriod,
    InvalidUri,
    MissingSecret,
    TotpParseError,
    UnsupportedAlgorithm,
    UnsupportedType,
)
from totp_mcp.otpauth import (
    Algorithm,
    TotpParams,
    decode_base32,
    is_otpauth_uri,
    params_from_base32,
    parse,
)


def test_parse_defaults() -> None:
    params = parse("otpauth://totp/alice?secret=JBSWY3DPEHPK3PXP")
    assert params.secret == b"Hello!\xde\xad\xbe\xef"
    assert params.algorithm is Algorithm.SHA1
    assert params.digits == 6
    assert params.period_seconds == 30
    assert params.label == "alice"
    assert params.issuer is None


def test_parse_all_parameters(rfc_uri: str) -> None:
    params = parse(rfc_uri + "&algorithm=sha256&issuer=ACME%20Corp")
    assert params.secret == b"12345678901234567890"
    assert params.algorithm is Algorithm.SHA256
    assert params.digits == 8
    assert params.period_seconds == 30
    # The issuer parameter wins over the label prefix
    assert params.issuer == "ACME Corp"
    assert params.label == "alice@example.com"


def test_label_prefix_used_as_issuer() -> None:
    params = parse("otpauth://totp/Example%3Abob?secret=JBSWY3DPEHPK3PXP")
    assert params.issuer == "Example"
    assert params.label == "bob"


def test_missing_label_is_not_an_error() -> None:
    params = parse("otpauth://totp/?secret=JBSWY3DPEHPK3PXP")
    assert params.label is None
    assert params.issuer is None


def test_secret_is_case_insensitive_and_padding_optional() -> None:
    a = parse("otpauth://totp/x?secret=gezdgnbvgy3tqojq")
    b = parse("otpauth://totp/x?secret=GEZDGNBVGY3TQOJQ")
    c = parse("otpauth://totp/x?secret=MFRGG===")
    assert a.secret == b.secret == b"1234567890"
    assert c.secret == b"abc"


def test_scheme_and_type_are_case_insensitive() -> None:
    params = parse("OTPAUTH://TOTP/x?secret=JBSWY3DPEHPK3PXP")
    assert params.digits == 6


def test_unknown_parameters_ignored() -> None:
    params = parse("otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&image=https%3A%2F%2Fa.b%2Fc.png&foo=bar")
    assert params.secret == b"Hello!\xde\xad\xbe\xef"


def test_rejects_unsupported_algorithm() -> None:
    with pytest.raises(UnsupportedAlgorithm):
        parse("otpauth://totp/x?algorithm=MD5&secret=ABC")


def test_rejects_hotp() -> None:
    with pytest.raises(UnsupportedType):
        parse("otpauth://hotp/x?secret=ABC")


def test_rejects_wrong_scheme() -> None:
    with pytest.raises(InvalidUri):
        parse("https://totp/x?secret=JBSWY3DPEHPK3PXP")


@pytest.mark.parametrize(
    "uri",
    [
        "otpauth://totp/x",
        "otpauth://totp/x?issuer=ACME",
        "otpauth://totp/x?secret=",
    ],
)
def test_rejects_missing_secret(uri: str) -> None:
    with pytest.raises(MissingSecret):
        parse(uri)


@pytest.mark.parametrize("secret", ["ABC", "JBSWY3DP!", "1", "========"])
def test_rejects_invalid_base32(secret: str) -> None:
    with pytest.raises(InvalidBase32):
        parse(f"otpauth://totp/x?secret={secret}")


@pytest.mark.parametrize("digits", ["6", "10"])
def test_digits_bounds_accepted(digits: str) -> None:
    assert parse(f"otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&digits={digits}").digits == int(digits)


# %2B8 is "+8"; %D9%A8 is ARABIC-INDIC DIGIT EIGHT
@pytest.mark.parametrize("digits", ["5", "11", "six", "1_0", "%2B8", "%D9%A8", "8.0"])
def test_digits_bounds_rejected(digits: str) -> None:
    with pytest.raises(InvalidDigits):
        parse(f"otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&digits={digits}")


def test_blank_digits_uses_default() -> None:
    # Blank values are dropped like absent parameters
    assert parse("otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&digits=").digits == 6


@pytest.mark.parametrize("uri", ["otpauth://[totp/x?secret=JBSWY3DPEHPK3PXP", "otpauth://totp]/x?secret=A"])
def test_unsplittable_uri_is_a_parse_error(uri: str) -> None:
    with pytest.raises(InvalidUri):
        parse(uri)


@pytest.mark.parametrize("period", ["0", "-30", "abc", "3_0", "%2B30"])
def test_rejects_invalid_period(period: str) -> None:
    with pytest.raises(InvalidPeriod):
        parse(f"otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&period={period}")


def test_errors_share_a_base_class() -> None:
    with pytest.raises(TotpParseError) as excinfo:
        parse("otpauth://totp/x?secret=JBSWY3DPEHPK3PXP&period=0")
    assert isinstance(excinfo.value, ValueError)
    assert "period" in str(excinfo.value)


def test_params_are_immutable() -> None:
    params = parse("otpauth://totp/x?secret=JBSWY3DPEHPK3PXP")
    with pytest.raises(ValidationError):
        params.digits = 8  # type: ignore[misc]


def test_params_validate_ranges() -> None:
    with pytest.raises(ValidationError):
        TotpParams(secret=b"k", digits=11)
    with pytest.raises(ValidationError):
        TotpParams(secret=b"k", period_seconds=0)


def test_decode_base32_ignores_spaces() -> None:
    assert decode_base32("JBSW Y3DP EHPK 3PXP") == b"Hello!\xde\xad\xbe\xef"


def test_params_from_base32() -> None:
    params = params_from_base32("GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ", digits=8)
    assert params.secret == b"12345678901234567890"
    assert params.digits == 8
    assert params.algorithm is Algorithm.SHA1


def test_is_otpauth_uri() -> None:
    assert is_otpauth_uri("  OTPAUTH://totp/x?secret=A")
    assert not is_otpauth_uri("hunter2")
