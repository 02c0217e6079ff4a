"""
Stream Event Base Types

The closed inventory of Responses API stream events, the mutable state a
turn accumulates while streaming, and the handler interface every event
kind is routed to.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from responsescli.core.errors import UnknownStreamEventError

if TYPE_CHECKING:
    from responsescli.core.chat_session import ChatTurn, PersistentChat
    from responsescli.core.response_tracker import ResponseIdTracker
    from responsescli.ui.displayers import DisplayHub


class StreamEventType(Enum):
    """Every event kind the v1/responses stream may emit, keyed by wire string."""
    CREATED = "response.created"
    IN_PROGRESS = "response.in_progress"
    COMPLETED = "response.completed"
    FAILED = "response.failed"
    INCOMPLETE = "response.incomplete"
    OUTPUT_ITEM_ADDED = "response.output_item.added"
    OUTPUT_ITEM_DONE = "response.output_item.done"
    CONTENT_PART_ADDED = "response.content_part.added"
    CONTENT_PART_DONE = "response.content_part.done"
    OUTPUT_TEXT_DELTA = "response.output_text.delta"
    OUTPUT_TEXT_ANNOTATION_ADDED = "response.output_text.annotation.added"
    OUTPUT_TEXT_DONE = "response.output_text.done"
    REFUSAL_DELTA = "response.refusal.delta"
    REFUSAL_DONE = "response.refusal.done"
    FUNCTION_CALL_ARGUMENTS_DELTA = "response.function_call_arguments.delta"
    FUNCTION_CALL_ARGUMENTS_DONE = "response.function_call_arguments.done"
    FILE_SEARCH_CALL_IN_PROGRESS = "response.file_search_call.in_progress"
    FILE_SEARCH_CALL_SEARCHING = "response.file_search_call.searching"
    FILE_SEARCH_CALL_COMPLETED = "response.file_search_call.completed"
    WEB_SEARCH_CALL_IN_PROGRESS = "response.web_search_call.in_progress"
    WEB_SEARCH_CALL_SEARCHING = "response.web_search_call.searching"
    WEB_SEARCH_CALL_COMPLETED = "response.web_search_call.completed"
    REASONING_SUMMARY_PART_ADDED = "response.reasoning_summary_part.added"
    REASONING_SUMMARY_PART_DONE = "response.reasoning_summary_part.done"
    REASONING_SUMMARY_TEXT_DELTA = "response.reasoning_summary_text.delta"
    REASONING_SUMMARY_TEXT_DONE = "response.reasoning_summary_text.done"
    ERROR = "error"

    @classmethod
    def from_wire(cls, wire_type: Optional[str]) -> "StreamEventType":
        """
        Decode a wire type string (case-insensitive).

        Raises:
            UnknownStreamEventError: If the string is not part of the enumeration
        """
        normalized = (wire_type or "").strip().lower()
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownStreamEventError(str(wire_type)) from None

    @classmethod
    def all_names(cls) -> list[str]:
        return [member.value for member in cls]


# ----------------------------------------------------------------------
# Event field access
# ----------------------------------------------------------------------

_MISSING = object()


def event_field(obj: Any, *path: str, default: Any = None) -> Any:
    """
    Read a nested field from an SDK event object or a plain dict.

    event_field(event, "response", "id") works for both
    `event.response.id` and `event["response"]["id"]`.
    """
    current = obj
    for name in path:
        if current is None:
            return default
        if isinstance(current, dict):
            current = current.get(name, _MISSING)
        else:
            current = getattr(current, name, _MISSING)
        if current is _MISSING:
            return default
    return default if current is None else current


def event_to_json(obj: Any) -> str:
    """Serialize an event (or part of one) for a turn's raw JSON snapshot."""
    if obj is None:
        return ""
    to_json = getattr(obj, "to_json", None)
    if callable(to_json):
        return to_json(indent=2)
    if isinstance(obj, (dict, list)):
        return json.dumps(obj, indent=2, ensure_ascii=False, default=str)
    return json.dumps(vars(obj), indent=2, ensure_ascii=False, default=lambda o: vars(o) if hasattr(o, "__dict__") else str(o))


# ----------------------------------------------------------------------
# Streaming state and handler interface
# ----------------------------------------------------------------------

@dataclass
class StreamState:
    """What a turn accumulates while its stream is being consumed."""
    buffer: str = ""
    displayed_count: int = 0


@dataclass
class HandlerContext:
    """Collaborators shared by every event handler."""
    tracker: "ResponseIdTracker"
    chat: "PersistentChat"
    displays: "DisplayHub"

    @property
    def turn(self) -> "ChatTurn":
        if self.chat.current_turn is None:
            # Events can only arrive while the engine has a turn open
            raise RuntimeError("No current turn to record stream events into")
        return self.chat.current_turn


class StreamEventHandler(ABC):
    """
    Base class for stream event handlers.

    Each handler claims one event kind. `handle` returns True to keep
    streaming and False to abort the turn.
    """

    event_type: StreamEventType

    def __init__(self, context: HandlerContext):
        self.context = context

    def can_handle(self, event_type: StreamEventType) -> bool:
        return event_type is self.event_type

    @abstractmethod
    def handle(self, event: Any, state: StreamState) -> bool:
        pass


class NoOpHandler(StreamEventHandler):
    """Acknowledges an event kind without acting on it."""

    def handle(self, event: Any, state: StreamState) -> bool:
        return True
