"""TOTP (RFC 6238) code generation on top of HOTP (RFC 4226)."""

from __future__ import annotations

import hmac
import struct
import time
from typing import Callable, Iterator, Optional

from pydantic import BaseModel, ConfigDict

from .otpauth import Algorithm, TotpParams


class CodeResult(BaseModel):
    """A code and the half-open window ``[valid_from, valid_until)`` it belongs to."""

    model_config = ConfigDict(frozen=True)

    code: str
    valid_from: int
    valid_until: int

    def seconds_remaining(self, now: float) -> int:
        """Whole seconds until the code rotates, as shown by a countdown."""
        return self.valid_until - int(now)

    @property
    def period_seconds(self) -> int:
        return self.valid_until - self.valid_from


def hotp(
    secret: bytes,
    counter: int,
    digits: int,
    algorithm: Algorithm = Algorithm.SHA1,
) -> str:
    """Generate an HOTP code.

    Args:
        secret: Raw shared secret bytes.
        counter: Moving factor (8-byte unsigned integer).
        digits: Number of digits in the output code.
        algorithm: HMAC digest to use.
    """
    counter_bytes = struct.pack("!Q", counter)
    hmac_digest = hmac.new(secret, counter_bytes, algorithm.digestmod).digest()
    offset = hmac_digest[-1] & 0x0F
    code = (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )
    hotp_value = code % (10 ** digits)
    return str(hotp_value).zfill(digits)


def generate(params: TotpParams, now: float) -> CodeResult:
    """Compute the TOTP code for the time step containing ``now``.

    Args:
        params: Parsed TOTP parameters.
        now: Unix timestamp in seconds.

    Returns:
        CodeResult for the current window.
    """
    period = params.period_seconds
    counter = int(now // period)
    valid_from = counter * period
    return CodeResult(
        code=hotp(params.secret, counter, params.digits, params.algorithm),
        valid_from=valid_from,
        valid_until=valid_from + period,
    )


def current_code(params: TotpParams, now: Optional[float] = None) -> dict[str, object]:
    """Return ``{code, seconds_remaining}`` for display at ``now`` (default: wall clock)."""
    ts = time.time() if now is None else now
    result = generate(params, ts)
    return {"code": result.code, "seconds_remaining": result.seconds_remaining(ts)}


def iter_codes(
    params: TotpParams,
    *,
    clock: Callable[[], float] = time.time,
    sleep: Callable[[float], None] = time.sleep,
    interval: float = 1.0,
) -> Iterator[tuple[CodeResult, int]]:
    """Yield ``(result, seconds_remaining)`` once per ``interval``, forever.

    Each tick is an independent call to :func:`generate`; stop by closing
    the generator or breaking out of the loop.
    """
    while True:
        now = clock()
        result = generate(params, now)
        yield result, result.seconds_remaining(now)
        sleep(interval)
