# responsescli/ui/__init__.py
"""
ResponsesCLI UI Module
Display sinks and terminal colors.
"""

from .displayers import (
    Page,
    DisplaySink,
    AnswerDisplay,
    PageSelector,
    HistoryView,
    PromptNavigator,
    AlertService,
    BufferedDisplay,
    BufferedAnswerDisplay,
    DisplayHub,
)
from . import colors

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
    "DisplayHub",
    "colors",
]
