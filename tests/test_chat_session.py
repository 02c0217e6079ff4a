import json

import pytest

from responsescli.core.chat_session import (
    DEFAULT_TITLE,
    ChatSession,
    ChatSessionList,
    ChatTurn,
    PersistentChat,
)
from responsescli.core.errors import ChatStorageError
from responsescli.core.vector_resources import VectorResource, VectorResourceList


def test_first_turn_sets_title_and_created_at():
    session = ChatSession()
    session.add_turn()

    assert session.title == DEFAULT_TITLE
    assert session.created_at > 0
    created = session.created_at

    session.set_title("Renamed")
    session.add_turn()
    assert session.title == "Renamed"
    assert session.created_at == created
    assert len(session.turns) == 2


def test_delete_reports_stored_turn_ids_only():
    sessions = ChatSessionList()
    session = sessions.add_session()
    session.turns = [
        ChatTurn(id="r1", storage=True),
        ChatTurn(id="r2", storage=False),
        ChatTurn(id="", storage=True),
    ]
    seen = []

    sessions.delete(session, on_stored_id=seen.append)

    assert seen == ["r1"]
    assert len(sessions) == 0


def test_rename_by_index_ignores_out_of_range():
    sessions = ChatSessionList()
    sessions.add_session()
    sessions.rename(0, "First").rename(5, "Nope")
    assert sessions.sessions[0].title == "First"


def test_response_ids_flatten_all_sessions():
    sessions = ChatSessionList()
    sessions.add_session().turns = [ChatTurn(id="a"), ChatTurn(id="b")]
    sessions.add_session().turns = [ChatTurn(id="c")]
    assert sessions.response_ids() == ["a", "b", "c"]


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "chat_sessions.json"
    sessions = ChatSessionList()
    session = sessions.add_session()
    turn = session.add_turn()
    turn.id = "r1"
    turn.prompt = "Bonjour"
    turn.response = "Salut ✓"
    turn.json_prompt = '{"model": "gpt-4.1-mini"}'

    sessions.save(path)
    loaded = ChatSessionList.load(path)

    assert loaded.to_dict() == sessions.to_dict()
    raw = path.read_text(encoding="utf-8")
    assert "Salut ✓" in raw
    assert raw.startswith('{\n  "sessions"')


def test_load_missing_file_is_empty(tmp_path):
    assert len(ChatSessionList.load(tmp_path / "absent.json")) == 0


def test_load_malformed_file_raises(tmp_path):
    path = tmp_path / "chat_sessions.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ChatStorageError):
        ChatSessionList.load(path)


def test_load_ignores_unknown_turn_fields(tmp_path):
    path = tmp_path / "chat_sessions.json"
    path.write_text(json.dumps({
        "sessions": [{"title": "T", "turns": [{"id": "r1", "legacy_field": 1}]}]
    }), encoding="utf-8")

    loaded = ChatSessionList.load(path)

    assert loaded.sessions[0].turns[0].id == "r1"


def test_persistent_chat_creates_session_on_demand(tmp_path):
    chat = PersistentChat(tmp_path / "chat_sessions.json")
    turn = chat.add_turn()

    assert chat.current_session is not None
    assert chat.current_turn is turn
    assert len(chat) == 1

    chat.clear()
    chat.add_turn()
    assert len(chat) == 2


def test_persistent_chat_save_and_reload(tmp_path):
    path = tmp_path / "chat_sessions.json"
    chat = PersistentChat(path)
    chat.add_turn().prompt = "hello"
    chat.save()

    chat.reload()

    assert chat.current_session is None
    assert chat.data.sessions[0].turns[0].prompt == "hello"


def test_select_session_points_at_last_turn(tmp_path):
    chat = PersistentChat(tmp_path / "chat_sessions.json")
    session = chat.add_session()
    session.turns = [ChatTurn(id="a"), ChatTurn(id="b")]
    chat.clear()

    chat.select_session(session)

    assert chat.current_turn.id == "b"


# ---------------------------------------------------------------------------
# Vector resources
# ---------------------------------------------------------------------------

def test_vector_resource_list_round_trip_and_active(tmp_path):
    path = tmp_path / "vector_resources.json"
    resources = VectorResourceList()
    resources.add(VectorResource(name="one", vector_store_id="vs_1"))
    resources.add(VectorResource(name="two", vector_store_id="vs_2"))
    resources.select(1)
    resources.save(path)

    loaded = VectorResourceList.load(path)

    assert loaded.item_index == 1
    assert loaded.vector_store_id == "vs_2"
    assert loaded.find("one").vector_store_id == "vs_1"


def test_vector_resource_delete_file_keeps_pairs_aligned():
    resource = VectorResource(files=["a", "b", "c"], file_upload_ids=["fa", "fb", "fc"])
    resource.delete_file(1)
    assert resource.files == ["a", "c"]
    assert resource.file_upload_ids == ["fa", "fc"]


def test_empty_resource_list_has_no_vector_store():
    resources = VectorResourceList()
    assert resources.active is None
    assert resources.vector_store_id == ""
    with pytest.raises(IndexError):
        resources.select(0)
