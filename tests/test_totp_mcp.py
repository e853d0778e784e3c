from unittest.mock import patch

import pytest

from totp_mcp.errors import UnsupportedAlgorithm
from totp_mcp.mcp_server import GetTotpCodeRequest, totp_for_secret, totp_for_uri

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def test_totp_for_uri() -> None:
    uri = f"otpauth://totp/x?secret={RFC_SECRET}&digits=8"
    assert totp_for_uri(uri, now=59) == {"code": "94287082", "seconds_remaining": 1}


def test_totp_for_uri_propagates_parse_errors() -> None:
    with pytest.raises(UnsupportedAlgorithm):
        totp_for_uri("otpauth://totp/x?algorithm=MD5&secret=ABC")


@patch("totp_mcp.mcp_server.fetch_secret")
def test_totp_for_secret_reads_uri_field(mock_fetch) -> None:  # type: ignore[no-untyped-def]
    mock_fetch.return_value = {"totp": f"otpauth://totp/x?secret={RFC_SECRET}&digits=8", "user": "bob"}
    request = GetTotpCodeRequest(secret_name="svc", namespace="prod")
    assert totp_for_secret(request, now=59) == {"code": "94287082", "seconds_remaining": 1}
    mock_fetch.assert_called_once_with("svc", "prod", None)


@patch("totp_mcp.mcp_server.fetch_secret")
def test_totp_for_secret_plain_base32(mock_fetch) -> None:  # type: ignore[no-untyped-def]
    # RFC 4226: counter 1 with 6 digits
    mock_fetch.return_value = {"value": RFC_SECRET}
    assert totp_for_secret(GetTotpCodeRequest(secret_name="seed"), now=59)["code"] == "287082"


@patch("totp_mcp.mcp_server.fetch_secret")
def test_totp_for_secret_missing_field(mock_fetch) -> None:  # type: ignore[no-untyped-def]
    mock_fetch.return_value = {"user": "bob"}
    with pytest.raises(KeyError):
        totp_for_secret(GetTotpCodeRequest(secret_name="svc"))
