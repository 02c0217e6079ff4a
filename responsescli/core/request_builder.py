# responsescli/core/request_builder.py
"""
Builds the parameters of a streamed v1/responses request from the turn,
the active feature modes and the user settings.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from responsescli.config.settings import Settings
from responsescli.core.chat_session import ChatTurn
from responsescli.core.instructions import InstructionBuilder
from responsescli.core.response_tracker import ResponseIdTracker

logger = logging.getLogger(__name__)

FILE_SEARCH_RESULTS = "file_search_call.results"


@dataclass
class FeatureModes:
    """
    Tool configuration of the next request.

    Reasoning mode sends no tools at all, whatever the other flags say.
    """
    web_search: bool = False
    file_search_disabled: bool = False
    reasoning: bool = False


class RequestBuilder:
    def __init__(
        self,
        settings: Settings,
        tracker: ResponseIdTracker,
        instructions: InstructionBuilder,
    ):
        self.settings = settings
        self.tracker = tracker
        self.instructions = instructions

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------
    def web_search_tool(self) -> Dict[str, Any]:
        tool: Dict[str, Any] = {
            "type": "web_search_preview",
            "search_context_size": self.settings.web_context_size,
        }
        country = self.settings.country.strip()
        city = self.settings.city.strip()
        if country or city:
            location: Dict[str, Any] = {"type": "approximate"}
            if country:
                location["country"] = country
            if city:
                location["city"] = city
            tool["user_location"] = location
        return tool

    @staticmethod
    def file_search_tool(vector_store_id: str) -> Dict[str, Any]:
        return {"type": "file_search", "vector_store_ids": [vector_store_id]}

    def tools(self, modes: FeatureModes, vector_store_id: str) -> List[Dict[str, Any]]:
        if modes.reasoning:
            return []
        if modes.file_search_disabled:
            return [self.web_search_tool()] if modes.web_search else []
        tools: List[Dict[str, Any]] = []
        if vector_store_id:
            tools.append(self.file_search_tool(vector_store_id))
        if modes.web_search:
            tools.append(self.web_search_tool())
        return tools

    # ------------------------------------------------------------------
    # Request
    # ------------------------------------------------------------------
    def build(
        self,
        turn: ChatTurn,
        modes: FeatureModes,
        vector_store_id: Optional[str] = "",
    ) -> Dict[str, Any]:
        """
        Build the request and record its JSON form in `turn.json_prompt`.

        Returns:
            Keyword arguments for `responses.create`
        """
        params: Dict[str, Any] = {}

        if modes.reasoning:
            params["model"] = self.settings.reasoning_model
            reasoning = {"effort": self.settings.reasoning_effort}
            if self.settings.use_summary:
                reasoning["summary"] = self.settings.reasoning_summary
            params["reasoning"] = reasoning
        else:
            params["model"] = self.settings.search_model

        params["input"] = turn.prompt
        params["instructions"] = self.instructions.build(modes)

        tools = self.tools(modes, vector_store_id or "")
        if tools:
            params["tools"] = tools
            if any(tool["type"] == "web_search_preview" for tool in tools):
                params["tool_choice"] = {"type": "web_search_preview"}

        params["include"] = [FILE_SEARCH_RESULTS]
        params["stream"] = True
        params["store"] = turn.storage

        if turn.storage and self.tracker.last_id:
            params["previous_response_id"] = self.tracker.last_id

        turn.json_prompt = json.dumps(params, indent=2, ensure_ascii=False)
        logger.debug(
            f"Request built: model={params['model']} tools={[t['type'] for t in tools]} "
            f"previous_response_id={params.get('previous_response_id', '')}"
        )
        return params
