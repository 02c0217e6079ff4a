# responsescli/core/instructions.py
"""
System instructions sent with every streamed request.
"""

import logging
from typing import TYPE_CHECKING, Optional

from responsescli.config.settings import Settings

if TYPE_CHECKING:
    from responsescli.core.request_builder import FeatureModes
    from responsescli.core.vector_resources import VectorResourceList

logger = logging.getLogger(__name__)

BASIC_TEMPLATE = """You are a helpful programming assistant.
The user is a {proficiency} developer; adapt the depth of your explanations to that level.
Answer in the language of the question, use Markdown, and put code in fenced blocks.
{addressing}"""

RESOURCE_TEMPLATE = """You are a programming assistant specialised in {description}.
The user is a {proficiency} developer; adapt the depth of your explanations to that level.
Your knowledge base is the documentation and sources of {description}, available through
the file search tool. Prefer it over general knowledge, and cite the files you rely on.
The project is hosted at {github}.
Answer in the language of the question, use Markdown, and put code in fenced blocks.
{addressing}{extra}"""


class InstructionBuilder:
    """
    Picks and fills the instructions template.

    The basic template is used when file search is off or in reasoning
    mode; otherwise the active vector resource is described to the model.
    """

    def __init__(self, settings: Settings, resources: Optional["VectorResourceList"] = None):
        self.settings = settings
        self.resources = resources

    def _addressing(self) -> str:
        name = self.settings.user_screen_name.strip()
        return f"Address the user as {name}." if name else ""

    def build(self, modes: "FeatureModes") -> str:
        resource = self.resources.active if self.resources is not None else None
        if modes.file_search_disabled or modes.reasoning or resource is None:
            return BASIC_TEMPLATE.format(
                proficiency=self.settings.proficiency,
                addressing=self._addressing(),
            ).strip()

        extra = f"\n{resource.instructions.strip()}" if resource.instructions.strip() else ""
        return RESOURCE_TEMPLATE.format(
            description=resource.description or resource.name,
            proficiency=self.settings.proficiency,
            github=resource.github or "an unspecified location",
            addressing=self._addressing(),
            extra=extra,
        ).strip()
