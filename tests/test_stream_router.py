"""
Tests for stream event decoding, routing and the individual handlers.
"""

from types import SimpleNamespace as NS

import pytest

from responsescli.core.chat_session import PersistentChat
from responsescli.core.errors import UnknownStreamEventError
from responsescli.core.events import (
    DEFAULT_HANDLERS,
    HandlerContext,
    StreamEventHandler,
    StreamEventRouter,
    StreamEventType,
    StreamState,
)
from responsescli.core.response_tracker import ResponseIdTracker
from responsescli.ui.displayers import DisplayHub, Page


def make_context(tmp_path) -> HandlerContext:
    chat = PersistentChat(tmp_path / "chat_sessions.json")
    chat.add_turn()
    return HandlerContext(
        tracker=ResponseIdTracker(tmp_path / "LogIds.txt"),
        chat=chat,
        displays=DisplayHub(),
    )


def make_router(tmp_path):
    context = make_context(tmp_path)
    return StreamEventRouter.default(context), context


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def test_enumeration_covers_every_wire_string():
    assert len(StreamEventType) == 27
    assert StreamEventType.from_wire("response.output_text.delta") is StreamEventType.OUTPUT_TEXT_DELTA
    assert StreamEventType.from_wire("error") is StreamEventType.ERROR


def test_decoding_is_case_insensitive():
    assert StreamEventType.from_wire("Response.Created") is StreamEventType.CREATED


def test_unknown_wire_string_raises():
    with pytest.raises(UnknownStreamEventError) as exc:
        StreamEventType.from_wire("response.audio.delta")
    assert exc.value.wire_type == "response.audio.delta"
    assert "response.audio.delta" in str(exc.value)


def test_every_event_type_has_a_default_handler(tmp_path):
    router, _ = make_router(tmp_path)
    assert len(DEFAULT_HANDLERS) == len(StreamEventType)
    for event_type in StreamEventType:
        assert router.find_handler(event_type) is not None


# ---------------------------------------------------------------------------
# Routing
# ---------------------------------------------------------------------------

def test_unmatched_event_continues_streaming(tmp_path):
    router = StreamEventRouter()
    assert router.route(NS(type="response.completed"), StreamState()) is True
    assert router.route({"type": "response.in_progress"}, StreamState()) is True


def test_router_unknown_wire_type_raises(tmp_path):
    router, _ = make_router(tmp_path)
    with pytest.raises(UnknownStreamEventError):
        router.route(NS(type="response.brand_new_event"), StreamState())


def test_first_matching_handler_wins(tmp_path):
    calls = []

    class Recorder(StreamEventHandler):
        event_type = StreamEventType.COMPLETED

        def __init__(self, name, result):
            super().__init__(context=None)
            self.name = name
            self.result = result

        def handle(self, event, state):
            calls.append(self.name)
            return self.result

    router = StreamEventRouter().register(Recorder("first", False)).register(Recorder("second", True))

    assert router.route(NS(type="response.completed"), StreamState()) is False
    assert calls == ["first"]


def test_error_event_aborts_and_keeps_buffer(tmp_path):
    router, context = make_router(tmp_path)
    state = StreamState(buffer="partial answer")

    result = router.route(NS(type="error", code="server_error", message="boom"), state)

    assert result is False
    assert context.turn.response == "partial answer"


def test_noop_kinds_continue(tmp_path):
    router, _ = make_router(tmp_path)
    for wire in ("response.in_progress", "response.completed", "response.web_search_call.searching"):
        assert router.route({"type": wire}, StreamState()) is True


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------

def test_created_records_response_id(tmp_path):
    router, context = make_router(tmp_path)
    router.route(NS(type="response.created", response=NS(id="resp_1")), StreamState())

    assert context.tracker.last_id == "resp_1"
    assert context.turn.id == "resp_1"


def test_output_text_delta_streams_sanitized_text(tmp_path):
    router, context = make_router(tmp_path)
    answer = context.displays.answer
    answer.show_reasoning()
    state = StreamState()

    router.route(NS(type="response.output_text.delta", delta="Hel\x07lo"), state)
    router.route({"type": "response.output_text.delta", "delta": " world"}, state)

    assert state.buffer == "Hello world"
    assert state.displayed_count == 2
    assert answer.text == "Hello world"
    assert answer.reasoning_visible is False


def test_output_text_delta_uses_fast_display_for_first_chunks(tmp_path):
    router, context = make_router(tmp_path)
    flags = []
    context.displays.answer.display_stream = lambda text, fast=False: flags.append(fast)
    state = StreamState(displayed_count=19)

    router.route(NS(type="response.output_text.delta", delta="a"), state)
    router.route(NS(type="response.output_text.delta", delta="b"), state)

    assert flags == [True, False]


def test_output_text_delta_survives_display_failure(tmp_path):
    router, context = make_router(tmp_path)

    def broken(text, fast=False):
        raise RuntimeError("view gone")

    context.displays.answer.display_stream = broken
    state = StreamState()

    assert router.route(NS(type="response.output_text.delta", delta="x"), state) is True
    assert state.buffer == "x"
    assert state.displayed_count == 1


def test_output_text_done_only_fills_empty_response(tmp_path):
    router, context = make_router(tmp_path)
    router.route(NS(type="response.output_text.done", text="final"), StreamState())
    assert context.turn.response == "final"

    router.route(NS(type="response.output_text.done", text="other"), StreamState())
    assert context.turn.response == "final"


def test_output_item_done_message_sets_response_and_json(tmp_path):
    router, context = make_router(tmp_path)
    event = NS(
        type="response.output_item.done",
        item=NS(id="MSG_123", content=[NS(text="from item")]),
    )

    router.route(event, StreamState())

    assert context.turn.response == "from item"
    assert "MSG_123" in context.turn.json_response


def test_output_item_done_file_search_displays_queries_and_results(tmp_path):
    router, context = make_router(tmp_path)
    event = NS(
        type="response.output_item.done",
        item=NS(
            id="fs_1",
            queries=["q1", "q2"],
            results=[NS(file_id="file-1", filename="doc.md", score=0.91234)],
        ),
    )

    router.route(event, StreamState())

    text = context.displays.file_search.text
    assert text.startswith("Queries : \n1. q1\n2. q2\n")
    assert "\n\nThe results of a file search: \n" in text
    assert "file-1\ndoc.md [score: 0.912]\n" in text
    assert "fs_1" in context.turn.json_file_search


def test_output_item_done_web_search_stores_json(tmp_path):
    router, context = make_router(tmp_path)
    router.route({"type": "response.output_item.done", "item": {"id": "ws_9"}}, StreamState())

    assert "ws_9" in context.turn.json_web_search
    assert context.turn.json_file_search == ""


def test_url_annotation_goes_to_web_search_panel(tmp_path):
    router, context = make_router(tmp_path)
    annotation = NS(url="https://example.com", title="Example", start_index=3, end_index=9)

    router.route(NS(type="response.output_text.annotation.added", annotation=annotation), StreamState())

    assert context.displays.selector.current is Page.WEB_SEARCH
    assert context.displays.web_search.text == (
        "\nAnnotation: Example \nIndexes = [ start( 3 ); end( 9 ) ]\nUrl: https://example.com\n"
    )


def test_file_annotation_goes_to_file_search_panel(tmp_path):
    router, context = make_router(tmp_path)
    annotation = NS(file_id="file-7", filename="guide.pdf", index=2)

    router.route(NS(type="response.output_text.annotation.added", annotation=annotation), StreamState())

    assert context.displays.selector.current is Page.FILE_SEARCH
    assert context.displays.file_search.text == "\nAnnotation: guide.pdf [index 2]\nfile-7\n"


def test_reasoning_summary_delta_and_done(tmp_path):
    router, context = make_router(tmp_path)

    router.route(NS(type="response.reasoning_summary_text.done"), StreamState())
    assert context.displays.reasoning.text == "Empty reasoning item"
    assert context.displays.selector.current is Page.REASONING

    context.displays.reasoning.clear()
    router.route(NS(type="response.reasoning_summary_text.delta", delta="Thinking"), StreamState())
    router.route(NS(type="response.reasoning_summary_text.done"), StreamState())
    assert context.displays.reasoning.text == "Thinking"


def test_reasoning_summary_delta_is_sanitized(tmp_path):
    router, context = make_router(tmp_path)

    router.route(NS(type="response.reasoning_summary_text.delta", delta="Wei\x00ghing\u00a0options"), StreamState())

    assert context.displays.reasoning.text == "Weighing options"


def test_function_call_arguments_done_stores_payload(tmp_path):
    router, context = make_router(tmp_path)
    router.route(
        {"type": "response.function_call_arguments.done", "arguments": "{\"city\": \"Paris\"}"},
        StreamState(),
    )
    assert "Paris" in context.turn.json_function_call
