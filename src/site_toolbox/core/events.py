"""EventBus — decoupled Observer for progress, log, and completion events."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

EventHandler = Callable[..., Any]


class EventBus:
    """Publish/subscribe bus between the builder and its front end.

    The builder emits ``progress``, ``log`` and ``completed`` events;
    the CLI subscribes and echoes them.  Handlers that raise are logged
    and skipped so a broken listener never aborts a build.
    """

    def __init__(self) -> None:
        """Initialise an empty event bus."""
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event: str, handler: EventHandler) -> EventHandler:
        """Register *handler* for *event* and return it.

        Args:
            event: Event name (e.g. ``"progress"``).
            handler: Callable invoked with the event's keyword arguments.

        Returns:
            The handler, so it can be kept for a later ``unsubscribe``.
        """
        self._handlers[event].append(handler)
        return handler

    def unsubscribe(self, event: str, handler: EventHandler) -> None:
        """Remove a previously registered handler.

        Args:
            event: The event name.
            handler: The handler to remove.
        """
        try:
            self._handlers[event].remove(handler)
        except ValueError:
            logger.warning("Handler %r was not subscribed to event %r", handler, event)

    def emit(self, event: str, **kwargs: Any) -> None:
        """Call every handler subscribed to *event* with *kwargs*."""
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(**kwargs)
            except Exception:
                logger.exception("Error in handler %r for event %r", handler, event)
