"""
Configuration Service

Service class for the JSON settings file.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

logger = logging.getLogger("ResponsesCLI.ConfigService")

DEFAULT_CONFIG_PATH = Path.home() / ".responsescli" / "config.json"


class ConfigService:
    """Loads the JSON config file the settings are built from."""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config service.

        Args:
            config_path: Path to config file (defaults to ~/.responsescli/config.json)
        """
        self.config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._config: Dict[str, Any] = {}

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from file.

        Returns:
            Configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid JSON
        """
        if not self.config_path.exists():
            logger.error(f"Config file not found at: {self.config_path}")
            raise FileNotFoundError(
                f"Config file not found at: {self.config_path}\n"
                "Please create config.json with at least your 'api_key'."
            )

        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing config.json: {e}")
            raise ValueError(
                f"Error parsing config.json: {e}\n"
                "Please ensure config.json is valid JSON."
            ) from e

        if not isinstance(data, dict):
            raise ValueError("config.json must contain a JSON object.")

        self._config = data
        logger.info(f"Configuration loaded from {self.config_path}")
        return self._config.copy()
