"""In-memory intake for webhook payloads.

Envelopes are kept for display only. Nothing is persisted; a restart
drops them.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from typing import Optional

from pydantic import BaseModel, Field

from .display import SecretView, build_secret_view


logger = logging.getLogger(__name__)


class WebhookEnvelope(BaseModel):
    """Payload shape: ``{"name": str, "fields": {str: str}}``."""

    name: str = Field(..., min_length=1)
    fields: dict[str, str] = Field(default_factory=dict)


class WebhookStore:
    """Latest envelope per name, bounded to ``max_entries``."""

    def __init__(self, max_entries: int = 100) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, WebhookEnvelope]" = OrderedDict()
        self._lock = threading.Lock()

    def put(self, envelope: WebhookEnvelope) -> None:
        with self._lock:
            self._entries.pop(envelope.name, None)
            self._entries[envelope.name] = envelope
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.info("Dropped oldest webhook entry %s", evicted)
        logger.info("Stored webhook entry %s (%d fields)", envelope.name, len(envelope.fields))

    def get(self, name: str) -> Optional[WebhookEnvelope]:
        with self._lock:
            return self._entries.get(name)

    def all(self) -> list[WebhookEnvelope]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def views(self, now: Optional[float] = None) -> list[SecretView]:
        """Render stored envelopes like secrets, with live TOTP codes."""
        ts = time.time() if now is None else now
        return [build_secret_view(e.name, e.fields, ts) for e in self.all()]
