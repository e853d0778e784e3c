"""Secrets Manager helper utilities.

Reads the secrets the reader displays from AWS Secrets Manager and turns
each one into a flat field map.

Values are not cached: every page refresh should see the current secret.
Only the boto3 client is cached, per region.
"""

from __future__ import annotations

import json
import logging
import os
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import boto3

from .config import ReaderConfig
from .display import SecretView, build_secret_view


logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def _get_secrets_client(region: Optional[str] = None) -> Any:
    """Return a cached boto3 Secrets Manager client.

    Args:
        region: Region name; falls back to AWS_REGION, AWS_DEFAULT_REGION, us-east-1.
    """
    region = region or os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION") or "us-east-1"
    return boto3.client("secretsmanager", region_name=region)


def _to_fields(raw: str) -> Dict[str, str]:
    """Split a secret string into fields.

    A JSON object becomes one field per key; anything else is a single
    ``value`` field.
    """
    try:
        obj = json.loads(raw)
    except ValueError:
        return {"value": raw}
    if not isinstance(obj, dict):
        return {"value": raw}
    return {
        str(key): value if isinstance(value, str) else json.dumps(value)
        for key, value in obj.items()
    }


def fetch_secret(
    secret_name: str,
    namespace: Optional[str] = None,
    region: Optional[str] = None,
) -> Dict[str, str]:
    """Fetch one secret and return its fields.

    Args:
        secret_name: Secret name, relative to ``namespace`` when given.
        namespace: Optional name prefix.
        region: Optional AWS region.

    Returns:
        Mapping of field name to string value.
    """
    secret_id = f"{namespace}/{secret_name}" if namespace else secret_name
    client = _get_secrets_client(region)
    response = client.get_secret_value(SecretId=secret_id)
    if response.get("SecretString") is not None:
        return _to_fields(str(response["SecretString"]))
    binary = response.get("SecretBinary", b"")
    if isinstance(binary, str):
        binary = binary.encode("utf-8")
    return _to_fields(binary.decode("utf-8", errors="replace"))


def read_secrets(config: ReaderConfig, now: Optional[float] = None) -> list[SecretView]:
    """Read every configured secret, capturing failures per secret.

    Args:
        config: Reader configuration listing the secret names.
        now: Timestamp for TOTP codes; defaults to the wall clock.

    Returns:
        One SecretView per configured name, in configured order.
    """
    ts = time.time() if now is None else now
    logger.info("Fetching secrets: %s", config.secret_names)
    views: list[SecretView] = []
    for name in config.secret_names:
        try:
            data = fetch_secret(config.secret_id(name), region=config.region)
        except Exception as exc:
            logger.error("Failed to read secret %s: %s", name, exc)
            views.append(SecretView(name=name, error=f"Failed to read: {exc}"))
            continue
        views.append(build_secret_view(name, data, ts))
    return views
