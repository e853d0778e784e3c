from __future__ import annotations

import logging
import os
import time
from typing import Any, Optional

from flask import Flask, jsonify, render_template

from .config import ReaderConfig
from .display import SecretView, collect_codes
from .secrets import read_secrets
from .webhook import WebhookStore


logger = logging.getLogger(__name__)


def create_app(config: ReaderConfig, webhooks: Optional[WebhookStore] = None) -> Flask:
    app = Flask(__name__)
    app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret")
    store = webhooks if webhooks is not None else WebhookStore()

    def _load(now: float) -> tuple[list[SecretView], Optional[str]]:
        try:
            return read_secrets(config, now=now), None
        except Exception as exc:
            logger.error("Failed to read secrets: %s", exc)
            return [], f"Failed to read secrets: {exc}"

    @app.get("/")
    def index() -> str:
        now = time.time()
        secrets, error = _load(now)
        return render_template(
            "index.html",
            secrets=secrets,
            webhooks=store.views(now),
            error=error,
            refresh_ms=config.refresh_seconds * 1000,
        )

    # --- Refresh payload polled by the page ---
    @app.get("/codes")
    def codes() -> Any:
        now = time.time()
        secrets, _ = _load(now)
        return jsonify(
            {
                "secrets": collect_codes(secrets),
                "webhooks": collect_codes(store.views(now)),
            }
        )

    return app
