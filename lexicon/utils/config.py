"""Configuration management for Lexicon."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from ..engine.scheduler import INTERVAL_DAYS, RELEARN_MINUTES, SchedulerConfig

logger = logging.getLogger(__name__)

THEMES = ("LIGHT", "DARK", "PARCHMENT")
DIALECTS = ("UK", "US")
COMPLEXITIES = ("STANDARD", "POLYMATH")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

DEFAULT_CONFIG: Dict[str, Any] = {
    "api_key": None,
    "theme": "LIGHT",
    "dialect": "US",
    "notifications": True,
    "offline_enabled": False,
    "complexity": "STANDARD",
    "log_level": "INFO",
    "scheduling": {
        "interval_days": list(INTERVAL_DAYS),
        "relearn_minutes": RELEARN_MINUTES,
        "fallback_to_full": True,
    },
}

_CHOICES = {
    "theme": THEMES,
    "dialect": DIALECTS,
    "complexity": COMPLEXITIES,
    "log_level": LOG_LEVELS,
}


def default_home() -> Path:
    """Directory holding config, database and audio cache."""
    return Path(os.environ.get("LEXICON_HOME", Path.home() / ".lexicon"))


class ConfigManager:
    """Manages application configuration with persistent storage."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else default_home()
        self.config_file = self.config_dir / "config.json"
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self._config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file, filling in defaults."""
        config = json.loads(json.dumps(DEFAULT_CONFIG))
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    stored = json.load(f)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Could not read config %s, using defaults: %s", self.config_file, e)
                return config

            if isinstance(stored, dict):
                scheduling = stored.pop("scheduling", None)
                config.update(stored)
                if isinstance(scheduling, dict):
                    config["scheduling"].update(scheduling)
        return config

    def _save_config(self) -> None:
        """Save configuration to file."""
        try:
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self._config, f, indent=2)
        except IOError as e:
            logger.error("Could not save config %s: %s", self.config_file, e)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value and save."""
        choices = _CHOICES.get(key)
        if choices and value not in choices:
            raise ValueError(f"{key} must be one of {choices}, got {value!r}")
        self._config[key] = value
        self._save_config()

    def get_api_key(self) -> Optional[str]:
        """Get stored API key, preferring the GEMINI_API_KEY environment variable."""
        return os.environ.get("GEMINI_API_KEY") or self.get("api_key")

    def set_api_key(self, api_key: str) -> None:
        self.set("api_key", api_key)

    def get_dialect(self) -> str:
        return self.get("dialect", "US")

    def set_scheduling(self, **values: Any) -> SchedulerConfig:
        """Update scheduling parameters. Invalid values are rejected before saving."""
        scheduling = dict(self._config["scheduling"])
        scheduling.update(values)
        config = self._build_scheduler_config(scheduling)
        self._config["scheduling"] = scheduling
        self._save_config()
        return config

    def scheduler_config(self) -> SchedulerConfig:
        """Scheduling parameters as a SchedulerConfig."""
        return self._build_scheduler_config(self._config["scheduling"])

    @staticmethod
    def _build_scheduler_config(scheduling: Dict[str, Any]) -> SchedulerConfig:
        return SchedulerConfig(
            interval_days=tuple(scheduling.get("interval_days", INTERVAL_DAYS)),
            relearn_minutes=scheduling.get("relearn_minutes", RELEARN_MINUTES),
            fallback_to_full=bool(scheduling.get("fallback_to_full", True)),
        )
