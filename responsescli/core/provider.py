# responsescli/core/provider.py
"""
ResponsesProvider

Single entry point used by the CLI: streamed and silent prompt execution,
chat session housekeeping, and remote file / vector store management.
"""

import logging
import os
from typing import Any, List, Optional, Tuple

from responsescli.config.settings import Settings
from responsescli.core.ai_client import ResponsesClient
from responsescli.core.chat_session import SESSIONS_FILENAME, ChatSession, PersistentChat
from responsescli.core.errors import ProviderError
from responsescli.core.events import event_field
from responsescli.core.execution_engine import Cancellation, PromptExecutionEngine
from responsescli.core.instructions import InstructionBuilder
from responsescli.core.request_builder import FeatureModes, RequestBuilder
from responsescli.core.response_tracker import LOG_IDS_FILENAME, ResponseIdTracker
from responsescli.core.stores import FileStoreLinker, VectorStoreLinker
from responsescli.core.vector_resources import (
    RESOURCES_FILENAME,
    VectorResource,
    VectorResourceList,
)
from responsescli.ui.displayers import DisplayHub

logger = logging.getLogger(__name__)


class ResponsesProvider:
    """
    Facade over the execution engine, the chat history and the linkers.

    Collaborators are passed in explicitly; `ResponsesProvider.create`
    wires the default set from the settings.
    """

    def __init__(
        self,
        client: ResponsesClient,
        settings: Settings,
        tracker: ResponseIdTracker,
        chat: PersistentChat,
        displays: DisplayHub,
        resources: Optional[VectorResourceList] = None,
        resources_path: Optional[str] = None,
    ):
        self.client = client
        self.settings = settings
        self.tracker = tracker
        self.chat = chat
        self.displays = displays
        self.resources = resources if resources is not None else VectorResourceList()
        self.resources_path = resources_path
        self.modes = FeatureModes()
        self.cancellation = Cancellation()

        self.instructions = InstructionBuilder(settings, self.resources)
        self.request_builder = RequestBuilder(settings, tracker, self.instructions)
        self.engine = PromptExecutionEngine(
            client=client,
            settings=settings,
            tracker=tracker,
            chat=chat,
            displays=displays,
            request_builder=self.request_builder,
            resources=self.resources,
            cancellation=self.cancellation,
        )
        self.file_store = FileStoreLinker(client)
        self.vector_store = VectorStoreLinker(client)

    @classmethod
    def create(
        cls,
        settings: Settings,
        displays: Optional[DisplayHub] = None,
        client: Optional[ResponsesClient] = None,
    ) -> "ResponsesProvider":
        """
        Build a provider whose state files live in `settings.data_path`.

        Raises:
            ValueError: If no API key is configured and no client is given
            ChatStorageError: If the chat history or resources file is unreadable
        """
        data_path = settings.data_path
        resources_path = data_path / RESOURCES_FILENAME
        return cls(
            client=client or ResponsesClient(api_key=settings.api_key),
            settings=settings,
            tracker=ResponseIdTracker(data_path / LOG_IDS_FILENAME),
            chat=PersistentChat(data_path / SESSIONS_FILENAME),
            displays=displays or DisplayHub(),
            resources=VectorResourceList.load(resources_path),
            resources_path=str(resources_path),
        )

    # ------------------------------------------------------------------
    # Prompt execution
    # ------------------------------------------------------------------
    async def execute(self, prompt: str, modes: Optional[FeatureModes] = None) -> str:
        """Stream one turn into the current session. See PromptExecutionEngine.execute."""
        return await self.engine.execute(prompt, modes or self.modes)

    def cancel(self) -> None:
        """Ask the running turn to stop before its next stream event."""
        self.cancellation.cancel()

    async def execute_silently(self, prompt: str, instructions: str = "") -> str:
        """
        One-shot request with the search model: no streaming, not stored
        on the server, no history and no display.

        Raises:
            ProviderError: If the request fails
        """
        params = {
            "model": self.settings.search_model,
            "input": prompt,
            "store": False,
        }
        if instructions:
            params["instructions"] = instructions
        response = await self.client.create(params, timeout=self.settings.timeout_seconds)
        return self._output_text(response)

    @staticmethod
    def _output_text(response: Any) -> str:
        parts: List[str] = []
        for item in event_field(response, "output", default=[]):
            for content in event_field(item, "content", default=[]):
                text = event_field(content, "text", default="")
                if text:
                    parts.append(text)
        return "".join(parts)

    # ------------------------------------------------------------------
    # Vector store linking
    # ------------------------------------------------------------------
    async def _link(self, file_name: str, file_id: str, vector_store_id: str) -> Optional[Tuple[str, str]]:
        if not os.path.isfile(file_name):
            logger.warning(f"Local file not found: {file_name}")
            return None
        file_id = await self.file_store.ensure_file_id(file_name, file_id)
        vector_store_id = await self.vector_store.ensure_vector_store_id(vector_store_id)
        await self.vector_store.ensure_vector_store_file_id(vector_store_id, file_id)
        return vector_store_id, file_id

    async def ensure_vector_store_file_linked(
        self,
        file_name: str,
        file_id: str = "",
        vector_store_id: str = "",
    ) -> str:
        """
        Make sure `file_name` is uploaded and attached to a live vector store.

        Returns:
            "<vector_store_id>\\n<file_id>", or "" when the local file is
            missing or a step failed (the failure is shown as an alert)
        """
        try:
            linked = await self._link(file_name, file_id, vector_store_id)
        except ProviderError as e:
            self.displays.alerts.show_warning(f"Error : {e}")
            return ""
        if linked is None:
            return ""
        return f"{linked[0]}\n{linked[1]}"

    async def link_resource_files(self, resource: VectorResource) -> bool:
        """
        Link every file of `resource`, one after another, writing the file
        ids and the vector store id back into it. Stops at the first failure.

        Returns:
            True if every file was linked
        """
        for index, file_name in enumerate(resource.files):
            try:
                linked = await self._link(file_name, resource.upload_id(index), resource.vector_store_id)
            except ProviderError as e:
                self.displays.alerts.show_warning(f"Error : {e}")
                self.save_resources()
                return False
            if linked is None:
                self.displays.alerts.show_warning(f"Error : {file_name} not found")
                self.save_resources()
                return False
            resource.vector_store_id, file_id = linked
            resource.set_upload_id(index, file_id)
            logger.info(f"Linked {file_name} ({index + 1}/{len(resource.files)})")
        self.save_resources()
        return True

    def save_resources(self) -> None:
        if self.resources_path:
            self.resources.save(self.resources_path)

    # ------------------------------------------------------------------
    # Remote deletion
    # ------------------------------------------------------------------
    async def delete_response(self, response_id: str) -> str:
        await self.client.delete_response(response_id)
        return f"{response_id} deleted"

    async def delete_file(self, file_id: str) -> str:
        return await self.file_store.delete_file(file_id)

    async def delete_vector_store_file(self, vector_store_id: str, file_id: str) -> str:
        return await self.vector_store.delete_vector_store_file(vector_store_id, file_id)

    async def remove_vector_store(self, vector_store_id: str) -> str:
        return await self.vector_store.delete_vector_store(vector_store_id)

    async def _forget_response(self, response_id: str) -> None:
        try:
            await self.delete_response(response_id)
        except ProviderError as e:
            logger.warning(f"Could not delete response {response_id}: {e}")
        self.tracker.remove_id(response_id)

    async def cleanup_orphans(self) -> List[str]:
        """
        Delete remote responses that no saved session references anymore.

        Returns:
            The orphan ids that were processed
        """
        orphans = self.tracker.get_orphans(self.chat.response_ids())
        for response_id in orphans:
            await self._forget_response(response_id)
        if orphans:
            logger.info(f"Cleaned up {len(orphans)} orphan response(s)")
        return orphans

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------
    async def delete_session(self, session: ChatSession) -> None:
        """Remove a session and the server-side state of its stored turns."""
        stored: List[str] = []
        self.chat.data.delete(session, on_stored_id=stored.append)
        if self.chat.current_session is session:
            self.new_chat()
        for response_id in stored:
            await self._forget_response(response_id)
        self.chat.save()
        self.displays.history.refresh()

    def resume_session(self, session: ChatSession) -> None:
        """Make `session` current and replay it so new turns chain onto it."""
        self.tracker.clear()
        self.chat.select_session(session)
        answer = self.displays.answer
        answer.clear()
        self.displays.clear_panels()
        for turn in session.turns:
            if not turn.response.strip():
                continue
            self.tracker.add(turn.id)
            answer.prompt(turn.prompt)
            answer.display(turn.response)
        self.displays.prompts.update()

    def new_chat(self) -> None:
        """Start over: the next turn opens a new session with no chaining."""
        self.tracker.clear()
        self.chat.clear()
        self.displays.answer.clear()
        self.displays.clear_panels()
