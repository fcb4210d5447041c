"""Realtime stub.

The backend has no push channel. ``channel(name).on(...).subscribe()`` keeps
existing call-sites working but never delivers an event.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class RealtimeChannel:
    def __init__(self, name: str) -> None:
        self.name = name
        self.handlers: list[tuple[str, Callable[[Any], Any]]] = []
        self.subscribed = False

    def on(self, event: str, callback: Callable[[Any], Any]) -> RealtimeChannel:
        self.handlers.append((event, callback))
        return self

    def subscribe(self) -> RealtimeChannel:
        logger.warning("Realtime channel %r is not supported; no events will be delivered", self.name)
        self.subscribed = True
        return self

    def unsubscribe(self) -> None:
        self.subscribed = False


class RealtimeClient:
    def channel(self, name: str) -> RealtimeChannel:
        return RealtimeChannel(name)
