"""
ResponsesCLI

Terminal client for the OpenAI streaming Responses API with file search,
web search and reasoning support.
"""

__version__ = "1.0.0"
