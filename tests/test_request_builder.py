import json

from responsescli.config.settings import Settings
from responsescli.core.chat_session import ChatTurn
from responsescli.core.instructions import InstructionBuilder
from responsescli.core.request_builder import FeatureModes, RequestBuilder
from responsescli.core.response_tracker import ResponseIdTracker
from responsescli.core.vector_resources import VectorResource, VectorResourceList


def make_builder(tmp_path, settings=None, resources=None):
    settings = settings or Settings(api_key="test-key")
    tracker = ResponseIdTracker(tmp_path / "LogIds.txt")
    builder = RequestBuilder(settings, tracker, InstructionBuilder(settings, resources))
    return builder, tracker


def make_turn(storage=True) -> ChatTurn:
    return ChatTurn(prompt="What is new?", storage=storage)


def tool_types(params):
    return [t["type"] for t in params.get("tools", [])]


def test_default_request_uses_search_model_and_no_tools(tmp_path):
    builder, _ = make_builder(tmp_path)
    params = builder.build(make_turn(), FeatureModes())

    assert params["model"] == "gpt-4.1-mini"
    assert params["input"] == "What is new?"
    assert params["include"] == ["file_search_call.results"]
    assert params["stream"] is True
    assert params["store"] is True
    assert "tools" not in params
    assert "tool_choice" not in params
    assert "reasoning" not in params
    assert "previous_response_id" not in params


def test_tool_matrix(tmp_path):
    builder, _ = make_builder(tmp_path)

    cases = [
        (FeatureModes(web_search=True, file_search_disabled=True), "vs_1", ["web_search_preview"]),
        (FeatureModes(web_search=False, file_search_disabled=True), "vs_1", []),
        (FeatureModes(web_search=True), "vs_1", ["file_search", "web_search_preview"]),
        (FeatureModes(web_search=True), "", ["web_search_preview"]),
        (FeatureModes(web_search=False), "vs_1", ["file_search"]),
        (FeatureModes(web_search=False), "", []),
        (FeatureModes(web_search=True, reasoning=True), "vs_1", []),
    ]
    for modes, store, expected in cases:
        assert tool_types(builder.build(make_turn(), modes, store)) == expected, modes


def test_file_search_tool_targets_vector_store(tmp_path):
    builder, _ = make_builder(tmp_path)
    params = builder.build(make_turn(), FeatureModes(), "vs_42")
    assert params["tools"] == [{"type": "file_search", "vector_store_ids": ["vs_42"]}]


def test_web_tool_forces_tool_choice_and_location(tmp_path):
    settings = Settings(api_key="k", web_context_size="high", country="FR", city="Paris")
    builder, _ = make_builder(tmp_path, settings=settings)

    params = builder.build(make_turn(), FeatureModes(web_search=True, file_search_disabled=True))

    assert params["tool_choice"] == {"type": "web_search_preview"}
    assert params["tools"] == [{
        "type": "web_search_preview",
        "search_context_size": "high",
        "user_location": {"type": "approximate", "country": "FR", "city": "Paris"},
    }]


def test_web_tool_without_location(tmp_path):
    builder, _ = make_builder(tmp_path)
    tool = builder.web_search_tool()
    assert "user_location" not in tool
    assert tool["search_context_size"] == "medium"


def test_reasoning_mode_uses_reasoning_model_and_effort(tmp_path):
    settings = Settings(api_key="k", reasoning_effort="high", use_summary=True, reasoning_summary="concise")
    builder, _ = make_builder(tmp_path, settings=settings)

    params = builder.build(make_turn(), FeatureModes(reasoning=True, web_search=True), "vs_1")

    assert params["model"] == "o4-mini"
    assert params["reasoning"] == {"effort": "high", "summary": "concise"}
    assert "tools" not in params


def test_reasoning_summary_omitted_unless_enabled(tmp_path):
    builder, _ = make_builder(tmp_path)
    params = builder.build(make_turn(), FeatureModes(reasoning=True))
    assert params["reasoning"] == {"effort": "medium"}


def test_previous_response_id_only_when_stored_and_cursor_set(tmp_path):
    builder, tracker = make_builder(tmp_path)
    assert "previous_response_id" not in builder.build(make_turn(), FeatureModes())

    tracker.add("resp_1")
    assert builder.build(make_turn(), FeatureModes())["previous_response_id"] == "resp_1"
    assert "previous_response_id" not in builder.build(make_turn(storage=False), FeatureModes())


def test_request_is_serialized_into_turn(tmp_path):
    builder, _ = make_builder(tmp_path)
    turn = make_turn()

    params = builder.build(turn, FeatureModes(web_search=True))

    assert json.loads(turn.json_prompt) == params


def test_instructions_switch_on_active_resource(tmp_path):
    resources = VectorResourceList()
    resources.add(VectorResource(
        name="sdk",
        description="the Acme SDK",
        github="https://github.com/acme/sdk",
        vector_store_id="vs_1",
    ))
    settings = Settings(api_key="k", proficiency="Senior", user_screen_name="Sam")
    builder, _ = make_builder(tmp_path, settings=settings, resources=resources)

    with_files = builder.build(make_turn(), FeatureModes(), resources.vector_store_id)["instructions"]
    assert "the Acme SDK" in with_files
    assert "https://github.com/acme/sdk" in with_files
    assert "Senior" in with_files
    assert "Sam" in with_files

    basic = builder.build(make_turn(), FeatureModes(file_search_disabled=True))["instructions"]
    assert "Acme" not in basic
    assert "Senior" in basic

    reasoning = builder.build(make_turn(), FeatureModes(reasoning=True))["instructions"]
    assert "Acme" not in reasoning
