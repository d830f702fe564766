"""Configuration management."""

import os
import json
import logging
from typing import Dict, Any, Optional
from pathlib import Path

# Configure logging
logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "COMMIT_PROGRESS_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "min_update_interval_ms": 100,
    "bar_width": 25,
    "refresh_per_second": 5,
    "author_width": 16,
    "label_width": 9,
    "parallel_workers": 4,
    "provider": "anthropic",
    "model": "claude-sonnet-4-5-20250929"
}


class Config:
    """Progress display settings, loaded from a JSON file over built-in defaults."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_file: Path to configuration file. Falls back to the
                COMMIT_PROGRESS_CONFIG environment variable, then to
                ``commit_progress.json`` in the working directory.
        """
        if config_file is None:
            env_path = os.getenv(CONFIG_ENV_VAR)
            config_file = Path(env_path) if env_path else Path("commit_progress.json")

        self.config_file = Path(config_file)
        self._overrides: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load overrides from file; unreadable files leave only the defaults."""
        if not self.config_file.exists():
            return

        try:
            with open(self.config_file, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_file}: {e}")
            return

        if isinstance(data, dict):
            self._overrides = data
        else:
            logger.warning(f"Ignoring config {self.config_file}: top level must be an object")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Value used when neither the file nor the defaults define the key

        Returns:
            Configuration value
        """
        if key in self._overrides:
            return self._overrides[key]
        return DEFAULT_CONFIG.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value.

        Args:
            key: Configuration key
            value: Configuration value
        """
        self._overrides[key] = value

    @property
    def min_update_interval(self) -> float:
        """Per-item throttle window in seconds."""
        return float(self.get("min_update_interval_ms")) / 1000.0

    def tracker_options(self) -> Dict[str, Any]:
        """Keyword arguments for building a ProgressTracker."""
        return {
            "min_update_interval": self.min_update_interval,
            "author_width": int(self.get("author_width")),
            "label_width": int(self.get("label_width")),
        }

    def renderer_options(self) -> Dict[str, Any]:
        """Keyword arguments for building a renderer."""
        return {
            "bar_width": int(self.get("bar_width")),
            "refresh_per_second": float(self.get("refresh_per_second")),
        }

    def save(self) -> None:
        """Save explicitly set values to file."""
        with open(self.config_file, 'w') as f:
            json.dump(self._overrides, f, indent=2)
