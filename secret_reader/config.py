"""Runtime configuration for the secret reader.

The configuration is built once at startup (from CLI options or the
environment) and passed explicitly to the web apps and the CLI commands.

Environment:
- SECRET_NAMES: comma-separated secret names to display
- SECRETS_NAMESPACE: optional name prefix, secrets are read as "<namespace>/<name>"
- AWS_REGION / AWS_DEFAULT_REGION: Secrets Manager region
- HOST, PORT: listen address for `serve`
- REFRESH_SECONDS: page refresh interval for TOTP codes
"""

from __future__ import annotations

import os
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfigError(ValueError):
    """Raised when the reader cannot start with the given settings."""


def split_names(values: Iterable[str] | str | None) -> list[str]:
    """Flatten comma-separated names, dropping blanks and duplicates."""
    if values is None:
        return []
    if isinstance(values, str):
        values = [values]
    names: list[str] = []
    for value in values:
        for name in value.split(","):
            name = name.strip()
            if name and name not in names:
                names.append(name)
    return names


class ReaderConfig(BaseModel):
    """Which secrets to show and where to serve them."""

    model_config = ConfigDict(frozen=True)

    secret_names: list[str] = Field(default_factory=list)
    namespace: Optional[str] = None
    region: Optional[str] = None
    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)
    refresh_seconds: int = Field(default=1, ge=1)

    @field_validator("secret_names", mode="before")
    @classmethod
    def _normalize_names(cls, value: object) -> list[str]:
        return split_names(value)  # type: ignore[arg-type]

    @field_validator("namespace", "region", mode="before")
    @classmethod
    def _blank_to_none(cls, value: object) -> object:
        if isinstance(value, str):
            value = value.strip().strip("/")
            return value or None
        return value

    @classmethod
    def from_env(cls, **overrides: object) -> "ReaderConfig":
        """Build configuration from environment variables.

        Keyword overrides that are not None take precedence over the environment.
        """
        values: dict[str, object] = {
            "secret_names": os.environ.get("SECRET_NAMES", ""),
            "namespace": os.environ.get("SECRETS_NAMESPACE"),
            "region": os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION"),
            "host": os.environ.get("HOST", "0.0.0.0"),
            "port": os.environ.get("PORT", "3000"),
            "refresh_seconds": os.environ.get("REFRESH_SECONDS", "1"),
        }
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "secret_names" and not split_names(value):  # type: ignore[arg-type]
                continue
            values[key] = value
        return cls(**values)

    def require_secrets(self) -> "ReaderConfig":
        """Return self, or raise ConfigError when no secret names are configured."""
        if not self.secret_names:
            raise ConfigError(
                "No secret names provided. Use --secrets with comma-separated secret names"
            )
        return self

    def secret_id(self, name: str) -> str:
        """Full Secrets Manager id for a configured name."""
        return f"{self.namespace}/{name}" if self.namespace else name
