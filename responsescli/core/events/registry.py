"""
Stream Event Router

Ordered registry of stream event handlers. Each event is decoded to its
StreamEventType and given to the first registered handler that claims it.
"""

import logging
from typing import Any, List, Optional

from responsescli.core.events.base import (
    HandlerContext,
    StreamEventHandler,
    StreamEventType,
    StreamState,
    event_field,
)
from responsescli.core.events.handlers import DEFAULT_HANDLERS

logger = logging.getLogger(__name__)


class StreamEventRouter:
    """
    Routes stream events to handlers.

    Handlers are consulted in registration order; the first one whose
    `can_handle` returns True wins. An event no handler claims is
    tolerated and streaming continues.
    """

    def __init__(self, handlers: Optional[List[StreamEventHandler]] = None):
        self._handlers: List[StreamEventHandler] = list(handlers or [])

    def register(self, handler: StreamEventHandler) -> "StreamEventRouter":
        """
        Register a handler at the end of the lookup order.

        Args:
            handler: Handler instance to register
        """
        self._handlers.append(handler)
        return self

    @property
    def handlers(self) -> List[StreamEventHandler]:
        return list(self._handlers)

    def clear(self) -> None:
        """Remove all registered handlers."""
        self._handlers.clear()

    def find_handler(self, event_type: StreamEventType) -> Optional[StreamEventHandler]:
        for handler in self._handlers:
            if handler.can_handle(event_type):
                return handler
        return None

    def route(self, event: Any, state: StreamState) -> bool:
        """
        Dispatch one event.

        Returns:
            False when the turn must stop (error event), True otherwise

        Raises:
            UnknownStreamEventError: If the event's wire type is not recognised
        """
        event_type = StreamEventType.from_wire(event_field(event, "type"))
        handler = self.find_handler(event_type)
        if handler is None:
            logger.debug(f"No handler registered for {event_type.value}")
            return True
        return handler.handle(event, state)

    @classmethod
    def default(cls, context: HandlerContext) -> "StreamEventRouter":
        """Build a router with one handler per event kind."""
        return cls([handler_class(context) for handler_class in DEFAULT_HANDLERS])
