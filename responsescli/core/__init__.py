# Core modules
from .chat_session import ChatSession, ChatSessionList, ChatTurn, PersistentChat
from .execution_engine import Cancellation, PromptExecutionEngine, TurnState
from .provider import ResponsesProvider
from .request_builder import FeatureModes, RequestBuilder
from .response_tracker import ResponseIdTracker

__all__ = [
    "ChatSession",
    "ChatSessionList",
    "ChatTurn",
    "PersistentChat",
    "Cancellation",
    "PromptExecutionEngine",
    "TurnState",
    "ResponsesProvider",
    "FeatureModes",
    "RequestBuilder",
    "ResponseIdTracker",
]
