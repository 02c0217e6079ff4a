"""
Settings

Typed, read-only view of the user configuration consumed by the engine.
"""

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from responsescli.services.config_service import ConfigService

logger = logging.getLogger(__name__)

SEARCH_MODELS = ["gpt-4o", "gpt-4o-mini", "gpt-4.1", "gpt-4.1-mini", "gpt-4.1-nano"]
REASONING_MODELS = ["o1", "o1-pro", "o3", "o3-mini", "o4-mini"]

REASONING_EFFORTS = ["low", "medium", "high"]
REASONING_SUMMARIES = ["auto", "concise", "detailed"]
WEB_CONTEXT_SIZES = ["low", "medium", "high"]

PROFICIENCY_LEVELS = ["Junior", "Intermediate", "Senior", "Lead Developer", "Software Architect"]

# Human-readable timeout labels and their duration in seconds
TIMEOUTS: Dict[str, int] = {
    "30 seconds": 30,
    "60 seconds": 60,
    "5 minutes": 300,
    "10 minutes": 600,
    "20 minutes": 1200,
    "30 minutes": 1800,
    "60 minutes": 3600,
    "5 hours": 18000,
    "12 hours": 43200,
    "24 hours": 86400,
}


def timeout_to_seconds(text: str) -> int:
    """
    Convert a timeout label such as "5 minutes" to seconds.

    Raises:
        ValueError: If the label is not one of TIMEOUTS
    """
    normalized = (text or "").strip().lower()
    for label, seconds in TIMEOUTS.items():
        if label == normalized:
            return seconds
    raise ValueError(f'"{text}" is not a correct timeout format')


@dataclass(frozen=True)
class Settings:
    """User settings. Unknown keys in the config file are ignored."""
    api_key: Optional[str] = None
    search_model: str = "gpt-4.1-mini"
    reasoning_model: str = "o4-mini"
    reasoning_effort: str = "medium"
    reasoning_summary: str = "detailed"
    use_summary: bool = False
    web_context_size: str = "medium"
    country: str = ""
    city: str = ""
    timeout: str = "30 seconds"
    proficiency: str = "Intermediate"
    user_screen_name: str = ""
    data_dir: str = "~/.responsescli"

    @property
    def timeout_seconds(self) -> int:
        return timeout_to_seconds(self.timeout)

    @property
    def data_path(self) -> Path:
        return Path(os.path.expanduser(self.data_dir))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        names = {f.name for f in fields(cls)}
        values = {k: v for k, v in data.items() if k in names}
        if not values.get("api_key"):
            values["api_key"] = os.environ.get("OPENAI_API_KEY")
        # Reject a bad timeout label at load time, not at the first request
        timeout_to_seconds(values.get("timeout", cls.timeout))
        return cls(**values)


def load_settings(config_path: Optional[Path] = None) -> Settings:
    """
    Load settings from the JSON config file.

    Raises:
        FileNotFoundError: If the config file is missing
        ValueError: If the config file is invalid
    """
    service = ConfigService(config_path=config_path)
    return Settings.from_dict(service.load())
