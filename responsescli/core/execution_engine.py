# responsescli/core/execution_engine.py
"""
Prompt Execution Engine

Runs one chat turn against the streaming Responses API: builds the
request, feeds every stream event through the StreamEventRouter and
settles the turn as succeeded, failed or cancelled. Whatever the outcome,
the turn is finalized and persisted exactly once.
"""

import logging
from enum import Enum
from typing import Any, AsyncGenerator, Optional, Tuple

from responsescli.config.settings import Settings
from responsescli.core.ai_client import ResponsesClient
from responsescli.core.chat_session import ChatTurn, PersistentChat
from responsescli.core.errors import (
    ProviderError,
    TurnCancelledError,
    TurnFailedError,
    UnknownStreamEventError,
)
from responsescli.core.events import (
    HandlerContext,
    StreamEventRouter,
    StreamState,
    event_field,
)
from responsescli.core.request_builder import FeatureModes, RequestBuilder
from responsescli.core.response_tracker import ResponseIdTracker
from responsescli.core.vector_resources import VectorResourceList
from responsescli.ui.displayers import DisplayHub
from responsescli.utils.text_sanitizer import clean_text

logger = logging.getLogger(__name__)

NO_ITEM_FOUND = "no item found"
CANCELED_MESSAGE = "Operation canceled"
ABORTED_SUFFIX = "\n\nAborted"


class TurnState(Enum):
    IDLE = "idle"
    STARTED = "started"
    STREAMING = "streaming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Cancellation:
    """Cooperative cancellation flag, polled before each stream event."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def reset(self) -> None:
        self._cancelled = False

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled


class PromptExecutionEngine:
    """
    Executes prompts as streamed turns.

    Only one `execute` may run at a time; the engine keeps per-turn state
    and is not re-entrant.
    """

    def __init__(
        self,
        client: ResponsesClient,
        settings: Settings,
        tracker: ResponseIdTracker,
        chat: PersistentChat,
        displays: DisplayHub,
        request_builder: RequestBuilder,
        resources: Optional[VectorResourceList] = None,
        router: Optional[StreamEventRouter] = None,
        cancellation: Optional[Cancellation] = None,
    ):
        self.client = client
        self.settings = settings
        self.tracker = tracker
        self.chat = chat
        self.displays = displays
        self.request_builder = request_builder
        self.resources = resources
        self.router = router or StreamEventRouter.default(
            HandlerContext(tracker=tracker, chat=chat, displays=displays)
        )
        self.cancellation = cancellation or Cancellation()
        self.state = TurnState.IDLE

    # ------------------------------------------------------------------
    # Turn lifecycle
    # ------------------------------------------------------------------
    def _start_turn(self, prompt: str) -> ChatTurn:
        turn = self.chat.add_turn()
        turn.storage = True
        turn.prompt = prompt
        self.cancellation.reset()
        self.state = TurnState.STARTED
        return turn

    def _start_display(self, prompt: str) -> None:
        answer = self.displays.answer
        answer.prompt(prompt)
        self.displays.clear_panels()
        answer.show_reasoning()

    def _finalize(self, turn: ChatTurn) -> None:
        """Copy the side panels into the turn, with a placeholder for empty ones."""
        displays = self.displays
        for panel in (displays.file_search, displays.web_search, displays.reasoning):
            if panel.is_empty:
                panel.display(NO_ITEM_FOUND)
        turn.file_search = displays.file_search.text
        turn.web_search = displays.web_search.text
        turn.reasoning = displays.reasoning.text

    def _persist(self) -> None:
        self.chat.save()
        self.displays.history.refresh()

    async def _consume(
        self,
        events: AsyncGenerator[Any, None],
        stream_state: StreamState,
    ) -> Tuple[TurnState, str]:
        self.state = TurnState.STREAMING
        async for event in events:
            if self.cancellation.is_cancelled:
                return TurnState.CANCELLED, CANCELED_MESSAGE
            if not self.router.route(event, stream_state):
                code = event_field(event, "code", default="")
                message = event_field(event, "message", default="")
                # Chain the next request to the last good response
                self.tracker.cancel()
                return TurnState.FAILED, f"({code}){message}"
        return TurnState.SUCCEEDED, ""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def execute(self, prompt: str, modes: Optional[FeatureModes] = None) -> str:
        """
        Run one streamed turn.

        Returns:
            The final response text

        Raises:
            TurnFailedError: On an error event, a transport failure, an
                unrecognised event type or any other error while streaming
            TurnCancelledError: If cancellation was requested mid-stream
        """
        if self.state is not TurnState.IDLE:
            raise RuntimeError("A turn is already in progress")

        try:
            turn = self._start_turn(prompt)
            stream_state = StreamState()
            outcome, message, cause = await self._stream(turn, modes or FeatureModes(), stream_state)

            if outcome is TurnState.SUCCEEDED:
                return self._on_success(turn, stream_state)
            if outcome is TurnState.CANCELLED:
                self._on_cancelled(turn, stream_state)
                raise TurnCancelledError()
            self._on_failed(turn, stream_state, message)
            raise TurnFailedError(message) from cause
        finally:
            self.cancellation.reset()
            self.state = TurnState.IDLE

    async def _stream(
        self,
        turn: ChatTurn,
        modes: FeatureModes,
        stream_state: StreamState,
    ) -> Tuple[TurnState, str, Optional[BaseException]]:
        """Build, send and consume the request. Errors become a FAILED outcome."""
        timeout = self.settings.timeout_seconds
        events = None
        try:
            vector_store_id = self.resources.vector_store_id if self.resources else ""
            params = self.request_builder.build(turn, modes, vector_store_id)
            self.chat.save()

            logger.info(f"Executing prompt (model={params['model']}, timeout={timeout}s)")
            self._start_display(turn.prompt)

            events = self.client.stream(params, timeout=timeout)
            outcome, message = await self._consume(events, stream_state)
            return outcome, message, None
        except (UnknownStreamEventError, ProviderError) as e:
            return TurnState.FAILED, str(e), e
        except Exception as e:
            logger.exception("Unexpected error while streaming")
            return TurnState.FAILED, f"{type(e).__name__}: {e}", e
        finally:
            if events is not None:
                await events.aclose()

    def _on_success(self, turn: ChatTurn, stream_state: StreamState) -> str:
        self.state = TurnState.SUCCEEDED
        # Streamed text wins over the consolidated text of done events
        if stream_state.buffer:
            turn.response = stream_state.buffer
        self._finalize(turn)
        self.displays.answer.display_stream("\n\n")
        self._persist()
        self.displays.prompts.update()
        logger.info(f"Turn completed ({len(turn.response)} chars)")
        return turn.response

    def _on_cancelled(self, turn: ChatTurn, stream_state: StreamState) -> None:
        self.state = TurnState.CANCELLED
        answer = self.displays.answer
        answer.hide_reasoning()
        answer.display(CANCELED_MESSAGE)
        turn.response = stream_state.buffer + ABORTED_SUFFIX
        self._finalize(turn)
        self.tracker.cancel()
        self._persist()
        logger.info("Turn cancelled")

    def _on_failed(self, turn: ChatTurn, stream_state: StreamState, message: str) -> None:
        self.state = TurnState.FAILED
        turn.response = stream_state.buffer
        self._finalize(turn)
        answer = self.displays.answer
        answer.hide_reasoning()
        answer.display(clean_text(message))
        self._persist()
        logger.error(f"Turn failed: {message}")
