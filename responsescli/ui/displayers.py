# responsescli/ui/displayers.py
"""
Display sinks the engine writes to.

The engine only depends on the abstract interfaces below. Buffered
implementations keep everything in memory (used for the side panels and in
tests); the Terminal* classes render to a text stream for the CLI.
"""

import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, TextIO

from responsescli.ui.colors import (
    ERROR_FG,
    FILE_SEARCH_FG,
    MUTED_FG,
    PROMPT_FG,
    REASONING_FG,
    WARNING_FG,
    WEB_SEARCH_FG,
    colorize,
)

logger = logging.getLogger(__name__)


class Page(Enum):
    """Side panels a handler can bring to the front."""
    ANSWER = "answer"
    FILE_SEARCH = "file_search"
    WEB_SEARCH = "web_search"
    REASONING = "reasoning"


# ----------------------------------------------------------------------
# Interfaces
# ----------------------------------------------------------------------

class DisplaySink(ABC):
    """A text panel (file search, web search, reasoning)."""

    @abstractmethod
    def display(self, text: str) -> None:
        pass

    def display_stream(self, text: str) -> None:
        self.display(text)

    @abstractmethod
    def clear(self) -> None:
        pass

    @property
    @abstractmethod
    def text(self) -> str:
        pass

    @property
    def is_empty(self) -> bool:
        return not self.text


class AnswerDisplay(ABC):
    """The main answer view with its "generating" indicator."""

    @abstractmethod
    def prompt(self, text: str) -> None:
        """Echo the submitted prompt."""

    @abstractmethod
    def display(self, text: str) -> None:
        """Append a complete block of text."""

    @abstractmethod
    def display_stream(self, text: str, fast: bool = False) -> None:
        """
        Append a streamed chunk. `fast` asks for an immediate flush; without
        it the sink may batch writes.
        """

    @abstractmethod
    def show_reasoning(self) -> None:
        """Show the generating indicator."""

    @abstractmethod
    def hide_reasoning(self) -> None:
        """Hide the generating indicator."""

    @abstractmethod
    def clear(self) -> None:
        pass


class PageSelector:
    """Tracks which side panel is in front. Default is a no-op view."""

    def __init__(self):
        self.current: Page = Page.ANSWER

    def show_page(self, page: Page) -> None:
        self.current = page


class HistoryView:
    """Chat history list. Refreshed after every finished turn."""

    def refresh(self) -> None:
        pass


class PromptNavigator:
    """Prompt-by-prompt navigation control. Updated after a successful turn."""

    def update(self) -> None:
        pass


class AlertService:
    """Warning channel for errors surfaced outside the answer stream."""

    def show_warning(self, message: str) -> None:
        logger.warning(message)

    def show_error(self, message: str) -> None:
        logger.error(message)


# ----------------------------------------------------------------------
# In-memory implementations
# ----------------------------------------------------------------------

class BufferedDisplay(DisplaySink):
    """Panel that accumulates text in memory."""

    def __init__(self):
        self._parts: List[str] = []

    def display(self, text: str) -> None:
        if text:
            self._parts.append(text)

    def clear(self) -> None:
        self._parts.clear()

    @property
    def text(self) -> str:
        return "".join(self._parts)


class BufferedAnswerDisplay(AnswerDisplay):
    """Answer view that records everything it is asked to show."""

    def __init__(self):
        self.prompts: List[str] = []
        self._parts: List[str] = []
        self.reasoning_visible = False

    @property
    def text(self) -> str:
        return "".join(self._parts)

    def prompt(self, text: str) -> None:
        self.prompts.append(text)

    def display(self, text: str) -> None:
        self._parts.append(text)

    def display_stream(self, text: str, fast: bool = False) -> None:
        self._parts.append(text)

    def show_reasoning(self) -> None:
        self.reasoning_visible = True

    def hide_reasoning(self) -> None:
        self.reasoning_visible = False

    def clear(self) -> None:
        self._parts.clear()


# ----------------------------------------------------------------------
# Terminal implementations
# ----------------------------------------------------------------------

class TerminalAnswerDisplay(AnswerDisplay):
    """Streams the answer to a terminal, flushing every few chunks once warmed up."""

    FLUSH_EVERY = 8

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._pending = 0
        self._indicator = False

    def _write(self, text: str, flush: bool) -> None:
        self.stream.write(text)
        self._pending += 1
        if flush or self._pending >= self.FLUSH_EVERY:
            self.stream.flush()
            self._pending = 0

    def prompt(self, text: str) -> None:
        self._write(colorize(f"\n> {text}\n\n", PROMPT_FG), flush=True)

    def display(self, text: str) -> None:
        self._write(text + "\n", flush=True)

    def display_stream(self, text: str, fast: bool = False) -> None:
        self._write(text, flush=fast)

    def show_reasoning(self) -> None:
        if not self._indicator:
            self._indicator = True
            self._write(colorize("… generating\r", MUTED_FG), flush=True)

    def hide_reasoning(self) -> None:
        if self._indicator:
            self._indicator = False
            # Overwrite the indicator line
            self._write("\r\033[K", flush=True)

    def clear(self) -> None:
        self.stream.flush()
        self._pending = 0


class TerminalPanel(BufferedDisplay):
    """Side panel kept in memory and printed as a block by `render()`."""

    def __init__(self, title: str, color: str, stream: Optional[TextIO] = None):
        super().__init__()
        self.title = title
        self.color = color
        self.stream = stream or sys.stdout

    def render(self) -> None:
        if self.is_empty:
            return
        self.stream.write(colorize(f"\n── {self.title} ──\n", self.color))
        self.stream.write(self.text.rstrip() + "\n")
        self.stream.flush()


class TerminalPageSelector(PageSelector):
    def show_page(self, page: Page) -> None:
        if page is not self.current:
            logger.debug(f"Switching panel to {page.value}")
        super().show_page(page)


class TerminalAlertService(AlertService):
    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stderr

    def show_warning(self, message: str) -> None:
        super().show_warning(message)
        self.stream.write(colorize(f"⚠ {message}\n", WARNING_FG))

    def show_error(self, message: str) -> None:
        super().show_error(message)
        self.stream.write(colorize(f"✗ {message}\n", ERROR_FG))


# ----------------------------------------------------------------------
# Wiring
# ----------------------------------------------------------------------

@dataclass
class DisplayHub:
    """All display collaborators of the engine, passed around as one object."""
    answer: AnswerDisplay = field(default_factory=BufferedAnswerDisplay)
    file_search: DisplaySink = field(default_factory=BufferedDisplay)
    web_search: DisplaySink = field(default_factory=BufferedDisplay)
    reasoning: DisplaySink = field(default_factory=BufferedDisplay)
    selector: PageSelector = field(default_factory=PageSelector)
    history: HistoryView = field(default_factory=HistoryView)
    prompts: PromptNavigator = field(default_factory=PromptNavigator)
    alerts: AlertService = field(default_factory=AlertService)

    def clear_panels(self) -> None:
        self.file_search.clear()
        self.web_search.clear()
        self.reasoning.clear()

    @classmethod
    def for_terminal(cls, stream: Optional[TextIO] = None) -> "DisplayHub":
        stream = stream or sys.stdout
        return cls(
            answer=TerminalAnswerDisplay(stream),
            file_search=TerminalPanel("File search", FILE_SEARCH_FG, stream),
            web_search=TerminalPanel("Web search", WEB_SEARCH_FG, stream),
            reasoning=TerminalPanel("Reasoning", REASONING_FG, stream),
            selector=TerminalPageSelector(),
            alerts=TerminalAlertService(),
        )

    def render_panels(self) -> None:
        """Print the side panels (terminal sinks only)."""
        for panel in (self.reasoning, self.file_search, self.web_search):
            if isinstance(panel, TerminalPanel):
                panel.render()


__all__ = [
    "Page",
    "DisplaySink",
    "AnswerDisplay",
    "PageSelector",
    "HistoryView",
    "PromptNavigator",
    "AlertService",
    "BufferedDisplay",
    "BufferedAnswerDisplay",
    "TerminalAnswerDisplay",
    "TerminalPanel",
    "TerminalPageSelector",
    "TerminalAlertService",
    "DisplayHub",
]
