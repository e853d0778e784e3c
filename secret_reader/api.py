"""FastAPI app exposing secrets, TOTP codes and webhook intake.

The HTML page from `flask_ui` is mounted at the root, after the API routes.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.wsgi import WSGIMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from totp_mcp.errors import TotpParseError
from totp_mcp.generator import generate
from totp_mcp.otpauth import parse

from .config import ReaderConfig
from .display import SecretView, collect_codes
from .flask_ui import create_app as _create_flask_app
from .secrets import read_secrets
from .webhook import WebhookEnvelope, WebhookStore


logger = logging.getLogger(__name__)


class TotpRequest(BaseModel):
    uri: str
    now: Optional[int] = Field(default=None, ge=0)


class TotpResponse(BaseModel):
    code: str
    seconds_remaining: int
    valid_from: int
    valid_until: int


def create_api(config: ReaderConfig, webhooks: Optional[WebhookStore] = None) -> FastAPI:
    """Build the API around one configuration and one webhook store."""
    app = FastAPI(title="Secret Reader")
    store = webhooks if webhooks is not None else WebhookStore()
    app.state.config = config
    app.state.webhooks = store

    @app.get("/health", response_class=PlainTextResponse)
    async def health() -> str:
        return "OK"

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    # --- Secrets ---

    @app.get("/api/secrets", response_model=list[SecretView])
    def list_secrets() -> list[SecretView]:
        return read_secrets(config)

    @app.get("/api/secrets/{name}", response_model=SecretView)
    def get_secret(name: str) -> SecretView:
        if name not in config.secret_names:
            raise HTTPException(status_code=404, detail=f"Unknown secret: {name}")
        views = read_secrets(config.model_copy(update={"secret_names": [name]}))
        return views[0]

    @app.get("/api/codes")
    def codes() -> dict[str, Any]:
        now = time.time()
        return {
            "secrets": collect_codes(read_secrets(config, now=now)),
            "webhooks": collect_codes(store.views(now)),
        }

    @app.post("/api/totp", response_model=TotpResponse)
    async def totp(payload: TotpRequest) -> TotpResponse:
        try:
            params = parse(payload.uri)
        except TotpParseError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        now = time.time() if payload.now is None else payload.now
        result = generate(params, now)
        return TotpResponse(
            code=result.code,
            seconds_remaining=result.seconds_remaining(now),
            valid_from=result.valid_from,
            valid_until=result.valid_until,
        )

    # --- Webhooks ---

    @app.post("/webhook")
    async def receive_webhook(envelope: WebhookEnvelope) -> dict[str, str]:
        logger.info("Received webhook for %s", envelope.name)
        store.put(envelope)
        return {"status": "stored", "name": envelope.name}

    @app.get("/api/webhooks", response_model=list[WebhookEnvelope])
    async def list_webhooks() -> list[WebhookEnvelope]:
        return store.all()

    # Mount last so API routes take precedence
    app.mount("/", WSGIMiddleware(_create_flask_app(config, store)))
    return app
