"""Publish/subscribe channel from the maker panel to the wall."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ikebana_wall.models import PostedFlower

logger = logging.getLogger(__name__)

Listener = Callable[[PostedFlower], None]


class FlowerBus:
    """
    In-process bus owned by one wall session and passed explicitly to the
    producer (maker) and the consumer (wall).

    post() delivers synchronously, in subscription order, to the listeners
    registered when the call starts. A listener that raises stops delivery
    and the error propagates to the poster.
    """

    def __init__(self) -> None:
        self._listeners: dict[Listener, None] = {}

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register listener; returns an idempotent unsubscribe function."""
        self._listeners[listener] = None

        def unsubscribe() -> None:
            self._listeners.pop(listener, None)

        return unsubscribe

    def post(self, flower: PostedFlower) -> int:
        """Deliver flower to current listeners. Returns how many were called."""
        listeners = list(self._listeners)
        logger.debug("posting %s to %d listener(s)", flower.id, len(listeners))
        for listener in listeners:
            listener(flower)
        return len(listeners)
