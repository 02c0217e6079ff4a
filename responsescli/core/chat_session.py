# responsescli/core/chat_session.py
"""
Chat history model and its JSON file persistence.

A ChatSessionList holds every saved session; PersistentChat wraps it with
the "current session" and "current turn" pointers the execution engine
writes into while a turn is streaming.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from responsescli.core.errors import ChatStorageError

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New chat ..."
SESSIONS_FILENAME = "chat_sessions.json"


def _now() -> int:
    return int(time.time())


# ----------------------------------------------------------------------
# Model
# ----------------------------------------------------------------------

@dataclass
class ChatTurn:
    """
    One prompt/response exchange.

    The json_* fields hold raw JSON snapshots of what went over the wire:
    the outbound request, the final message item, file/web search items and
    function call payloads.
    """
    id: str = ""
    storage: bool = False
    prompt: str = ""
    response: str = ""
    file_search: str = ""
    web_search: str = ""
    reasoning: str = ""
    json_prompt: str = ""
    json_response: str = ""
    json_file_search: str = ""
    json_web_search: str = ""
    json_function_call: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatTurn":
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class ChatSession:
    """An ordered list of turns sharing a title and timestamps."""
    title: str = ""
    created_at: int = 0
    modified_at: int = 0
    turns: List[ChatTurn] = field(default_factory=list)

    def add_turn(self) -> ChatTurn:
        """
        Append a new turn. The first turn stamps created_at and the
        default title; every turn refreshes modified_at.
        """
        turn = ChatTurn()
        self.turns.append(turn)
        now = _now()
        if len(self.turns) == 1:
            self.created_at = now
            self.title = DEFAULT_TITLE
        self.modified_at = now
        return turn

    def set_title(self, title: str) -> "ChatSession":
        self.title = title
        return self

    def stored_response_ids(self) -> List[str]:
        """Ids of turns that were chained on the server."""
        return [t.id for t in self.turns if t.storage and t.id]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatSession":
        return cls(
            title=data.get("title", ""),
            created_at=int(data.get("created_at", 0) or 0),
            modified_at=int(data.get("modified_at", 0) or 0),
            turns=[ChatTurn.from_dict(t) for t in data.get("turns", []) or []],
        )


@dataclass
class ChatSessionList:
    """The full persisted chat history."""
    sessions: List[ChatSession] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.sessions)

    def add_session(self) -> ChatSession:
        session = ChatSession()
        self.sessions.append(session)
        return session

    def delete(
        self,
        session: ChatSession,
        on_stored_id: Optional[Callable[[str], None]] = None,
    ) -> "ChatSessionList":
        """
        Remove a session. `on_stored_id` is called with the id of every
        stored turn so the caller can drop the remote conversation state.
        """
        if on_stored_id is not None:
            for response_id in session.stored_response_ids():
                on_stored_id(response_id)
        self.sessions = [s for s in self.sessions if s is not session]
        return self

    def rename(self, index: int, title: str) -> "ChatSessionList":
        if 0 <= index < len(self.sessions):
            self.sessions[index].set_title(title)
        return self

    def index_of(self, session: ChatSession) -> int:
        for i, s in enumerate(self.sessions):
            if s is session:
                return i
        return -1

    def response_ids(self) -> List[str]:
        """Every turn id referenced by the history, in order."""
        return [t.id for s in self.sessions for t in s.turns]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {"sessions": [s.to_dict() for s in self.sessions]}

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(
                json.dumps(self.to_dict(), indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.error(f"Failed to save chat history: {e}")
            raise ChatStorageError(f"Failed to save chat history to {path}: {e}") from e

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ChatSessionList":
        """
        Load the history. A missing file yields an empty list; an
        unreadable or malformed one raises ChatStorageError.
        """
        path = Path(path)
        if not path.exists():
            return cls()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load chat history: {e}")
            raise ChatStorageError(f"Failed to load chat history from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ChatStorageError(f"Chat history in {path} is not a JSON object")
        return cls(sessions=[ChatSession.from_dict(s) for s in data.get("sessions", []) or []])


# ----------------------------------------------------------------------
# Persistence facade
# ----------------------------------------------------------------------

class PersistentChat:
    """
    Owns the session list and the current session/turn pointers.

    All writes during a turn go through this object, so the history file
    is only ever written from the execution engine's finalize path.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.data = ChatSessionList.load(self.path)
        self.current_session: Optional[ChatSession] = None
        self.current_turn: Optional[ChatTurn] = None

    def __len__(self) -> int:
        return len(self.data)

    def add_session(self) -> ChatSession:
        self.current_session = self.data.add_session()
        self.current_turn = None
        return self.current_session

    def add_turn(self) -> ChatTurn:
        """Start a new turn, creating a session first if none is current."""
        if self.current_session is None:
            self.current_session = self.data.add_session()
        self.current_turn = self.current_session.add_turn()
        return self.current_turn

    def select_session(self, session: ChatSession) -> None:
        self.current_session = session
        self.current_turn = session.turns[-1] if session.turns else None

    def clear(self) -> None:
        """Drop the current pointers so the next turn opens a new session."""
        self.current_session = None
        self.current_turn = None

    def response_ids(self) -> List[str]:
        return self.data.response_ids()

    def save(self) -> None:
        self.data.save(self.path)

    def reload(self) -> None:
        self.data = ChatSessionList.load(self.path)
        self.clear()
