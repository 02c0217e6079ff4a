"""
Stream Event Handlers

One handler per StreamEventType. Handlers update the current chat turn,
the streaming buffer and the display sinks; only the error handler stops
the turn.
"""

import logging
from typing import Any, List, Type

from responsescli.core.events.base import (
    NoOpHandler,
    StreamEventHandler,
    StreamEventType,
    StreamState,
    event_field,
    event_to_json,
)
from responsescli.ui.displayers import Page
from responsescli.utils.text_sanitizer import clean_text

logger = logging.getLogger(__name__)

# Chunks below this count are flushed immediately so the answer starts
# appearing without delay
FAST_DISPLAY_CHUNKS = 20

EMPTY_REASONING = "Empty reasoning item"


# ----------------------------------------------------------------------
# Lifecycle
# ----------------------------------------------------------------------

class CreatedHandler(StreamEventHandler):
    """Records the server-assigned response id on the turn and in the tracker."""

    event_type = StreamEventType.CREATED

    def handle(self, event: Any, state: StreamState) -> bool:
        response_id = event_field(event, "response", "id", default="")
        logger.debug(f"Response created: {response_id}")
        if response_id:
            self.context.turn.id = response_id
        self.context.tracker.add(response_id)
        return True


class InProgressHandler(NoOpHandler):
    event_type = StreamEventType.IN_PROGRESS


class CompletedHandler(NoOpHandler):
    event_type = StreamEventType.COMPLETED


class FailedHandler(NoOpHandler):
    event_type = StreamEventType.FAILED


class IncompleteHandler(NoOpHandler):
    event_type = StreamEventType.INCOMPLETE


class ErrorHandler(StreamEventHandler):
    """Keeps whatever text was streamed so far and stops the turn."""

    event_type = StreamEventType.ERROR

    def handle(self, event: Any, state: StreamState) -> bool:
        self.context.turn.response = state.buffer
        logger.debug(
            f"Error event: ({event_field(event, 'code', default='')})"
            f"{event_field(event, 'message', default='')}"
        )
        return False


# ----------------------------------------------------------------------
# Output items
# ----------------------------------------------------------------------

class OutputItemAddedHandler(NoOpHandler):
    event_type = StreamEventType.OUTPUT_ITEM_ADDED


class OutputItemDoneHandler(StreamEventHandler):
    """
    Captures finished output items, keyed by id prefix:
    `msg_` message, `fs_` file search call, `ws_` web search call.
    """

    event_type = StreamEventType.OUTPUT_ITEM_DONE

    def handle(self, event: Any, state: StreamState) -> bool:
        turn = self.context.turn
        item_id = str(event_field(event, "item", "id", default="")).lower()

        if item_id.startswith("msg_"):
            if not turn.json_response.strip():
                turn.json_response = event_to_json(event)
            if not turn.response.strip():
                content = event_field(event, "item", "content", default=[])
                if content:
                    turn.response = event_field(content[0], "text", default="")
        elif item_id.startswith("fs_"):
            turn.json_file_search = event_to_json(event)
            self._display_queries(event)
            self._display_results(event)
        elif item_id.startswith("ws_"):
            turn.json_web_search = event_to_json(event)
        return True

    def _display_queries(self, event: Any) -> None:
        queries = event_field(event, "item", "queries", default=[])
        if not queries:
            return
        panel = self.context.displays.file_search
        panel.display("Queries : \n")
        for number, query in enumerate(queries, start=1):
            panel.display(f"{number}. {query}\n")

    def _display_results(self, event: Any) -> None:
        results = event_field(event, "item", "results", default=[])
        if not results:
            return
        panel = self.context.displays.file_search
        panel.display("\n\nThe results of a file search: \n")
        for result in results:
            score = float(event_field(result, "score", default=0.0))
            panel.display(
                f"{event_field(result, 'file_id', default='')}\n"
                f"{event_field(result, 'filename', default='')} [score: {score:.3f}]\n"
            )


class ContentPartAddedHandler(NoOpHandler):
    event_type = StreamEventType.CONTENT_PART_ADDED


class ContentPartDoneHandler(NoOpHandler):
    event_type = StreamEventType.CONTENT_PART_DONE


# ----------------------------------------------------------------------
# Output text
# ----------------------------------------------------------------------

class OutputTextDeltaHandler(StreamEventHandler):
    """Streams answer text to the display and the turn buffer."""

    event_type = StreamEventType.OUTPUT_TEXT_DELTA

    def handle(self, event: Any, state: StreamState) -> bool:
        answer = self.context.displays.answer
        answer.hide_reasoning()
        delta = clean_text(event_field(event, "delta", default=""))
        try:
            answer.display_stream(delta, fast=state.displayed_count < FAST_DISPLAY_CHUNKS)
        except Exception as e:
            # The buffer stays authoritative even if the view fails
            logger.warning(f"Failed to display stream chunk: {e}")
        state.displayed_count += 1
        state.buffer += delta
        return True


class OutputTextAnnotationAddedHandler(StreamEventHandler):
    """Routes URL citations to the web search panel and file citations to the file search panel."""

    event_type = StreamEventType.OUTPUT_TEXT_ANNOTATION_ADDED

    def handle(self, event: Any, state: StreamState) -> bool:
        displays = self.context.displays
        annotation = event_field(event, "annotation")

        url = event_field(annotation, "url", default="")
        if url:
            displays.selector.show_page(Page.WEB_SEARCH)
            displays.web_search.display("\nAnnotation: ")
            displays.web_search.display(
                f"{event_field(annotation, 'title', default='')} \n"
                f"Indexes = [ start( {event_field(annotation, 'start_index', default=0)} ); "
                f"end( {event_field(annotation, 'end_index', default=0)} ) ]\n"
                f"Url: {url}\n"
            )

        file_id = event_field(annotation, "file_id", default="")
        if file_id:
            displays.selector.show_page(Page.FILE_SEARCH)
            displays.file_search.display("\nAnnotation: ")
            displays.file_search.display(
                f"{event_field(annotation, 'filename', default='')} "
                f"[index {event_field(annotation, 'index', default=0)}]\n"
                f"{file_id}\n"
            )
        return True


class OutputTextDoneHandler(StreamEventHandler):
    event_type = StreamEventType.OUTPUT_TEXT_DONE

    def handle(self, event: Any, state: StreamState) -> bool:
        turn = self.context.turn
        if not turn.response.strip():
            turn.response = event_field(event, "text", default="")
        return True


class RefusalDeltaHandler(NoOpHandler):
    event_type = StreamEventType.REFUSAL_DELTA


class RefusalDoneHandler(NoOpHandler):
    event_type = StreamEventType.REFUSAL_DONE


# ----------------------------------------------------------------------
# Tool calls
# ----------------------------------------------------------------------

class FunctionCallArgumentsDeltaHandler(NoOpHandler):
    event_type = StreamEventType.FUNCTION_CALL_ARGUMENTS_DELTA


class FunctionCallArgumentsDoneHandler(StreamEventHandler):
    """Keeps the completed function call payload on the turn."""

    event_type = StreamEventType.FUNCTION_CALL_ARGUMENTS_DONE

    def handle(self, event: Any, state: StreamState) -> bool:
        self.context.turn.json_function_call = event_to_json(event)
        return True


class FileSearchCallInProgressHandler(NoOpHandler):
    event_type = StreamEventType.FILE_SEARCH_CALL_IN_PROGRESS


class FileSearchCallSearchingHandler(NoOpHandler):
    event_type = StreamEventType.FILE_SEARCH_CALL_SEARCHING


class FileSearchCallCompletedHandler(NoOpHandler):
    event_type = StreamEventType.FILE_SEARCH_CALL_COMPLETED


class WebSearchCallInProgressHandler(NoOpHandler):
    event_type = StreamEventType.WEB_SEARCH_CALL_IN_PROGRESS


class WebSearchCallSearchingHandler(NoOpHandler):
    event_type = StreamEventType.WEB_SEARCH_CALL_SEARCHING


class WebSearchCallCompletedHandler(NoOpHandler):
    event_type = StreamEventType.WEB_SEARCH_CALL_COMPLETED


# ----------------------------------------------------------------------
# Reasoning summary
# ----------------------------------------------------------------------

class ReasoningSummaryPartAddedHandler(NoOpHandler):
    event_type = StreamEventType.REASONING_SUMMARY_PART_ADDED


class ReasoningSummaryPartDoneHandler(NoOpHandler):
    event_type = StreamEventType.REASONING_SUMMARY_PART_DONE


class ReasoningSummaryTextDeltaHandler(StreamEventHandler):
    event_type = StreamEventType.REASONING_SUMMARY_TEXT_DELTA

    def handle(self, event: Any, state: StreamState) -> bool:
        displays = self.context.displays
        displays.selector.show_page(Page.REASONING)
        displays.reasoning.display_stream(clean_text(event_field(event, "delta", default="")))
        return True


class ReasoningSummaryTextDoneHandler(StreamEventHandler):
    event_type = StreamEventType.REASONING_SUMMARY_TEXT_DONE

    def handle(self, event: Any, state: StreamState) -> bool:
        displays = self.context.displays
        displays.selector.show_page(Page.REASONING)
        if displays.reasoning.is_empty:
            displays.reasoning.display_stream(EMPTY_REASONING)
        return True


# Registration order of StreamEventRouter.default()
DEFAULT_HANDLERS: List[Type[StreamEventHandler]] = [
    CreatedHandler,
    InProgressHandler,
    CompletedHandler,
    FailedHandler,
    IncompleteHandler,
    OutputItemAddedHandler,
    OutputItemDoneHandler,
    ContentPartAddedHandler,
    ContentPartDoneHandler,
    OutputTextDeltaHandler,
    OutputTextAnnotationAddedHandler,
    OutputTextDoneHandler,
    RefusalDeltaHandler,
    RefusalDoneHandler,
    FunctionCallArgumentsDeltaHandler,
    FunctionCallArgumentsDoneHandler,
    FileSearchCallInProgressHandler,
    FileSearchCallSearchingHandler,
    FileSearchCallCompletedHandler,
    WebSearchCallInProgressHandler,
    WebSearchCallSearchingHandler,
    WebSearchCallCompletedHandler,
    ReasoningSummaryPartAddedHandler,
    ReasoningSummaryPartDoneHandler,
    ReasoningSummaryTextDeltaHandler,
    ReasoningSummaryTextDoneHandler,
    ErrorHandler,
]
