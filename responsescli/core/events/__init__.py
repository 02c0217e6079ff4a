"""
Stream event decoding and dispatch for the Responses API.
"""

from responsescli.core.events.base import (
    HandlerContext,
    NoOpHandler,
    StreamEventHandler,
    StreamEventType,
    StreamState,
    event_field,
    event_to_json,
)
from responsescli.core.events.handlers import DEFAULT_HANDLERS
from responsescli.core.events.registry import StreamEventRouter

__all__ = [
    "HandlerContext",
    "NoOpHandler",
    "StreamEventHandler",
    "StreamEventType",
    "StreamState",
    "StreamEventRouter",
    "DEFAULT_HANDLERS",
    "event_field",
    "event_to_json",
]
