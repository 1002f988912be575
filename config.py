import os
from enum import Enum
from typing import Dict

from dotenv import load_dotenv

from detection.ledger import ActivityKind, DetectionConfig, DEFAULT_DETECTION_CONFIGS

# Load environment variables from .env file if present
load_dotenv()

class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"

class Config:
    def __init__(self):
        self.DISCORD_TOKEN = self._get_required("DISCORD_TOKEN")
        self.MODERATOR_ROLE_ID = self._get_required_int("MODERATOR_ROLE_ID")
        self.SUSPICIOUS_ROLE_ID = self._get_required_int("SUSPICIOUS_ROLE_ID")
        self.LOG_CHANNEL_ID = self._get_required_int("LOG_CHANNEL_ID")

        self.ENVIRONMENT = Environment(os.getenv("ENVIRONMENT", "development"))
        self.COMMAND_PREFIX = os.getenv("COMMAND_PREFIX", "!")
        self.SWEEP_INTERVAL_MINUTES = self._get_int("SWEEP_INTERVAL_MINUTES", 60)

        self.DETECTION = self._load_detection_configs()

    def _get_required(self, key: str) -> str:
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Missing required environment variable: {key}")
        return value

    def _get_required_int(self, key: str) -> int:
        value = self._get_required(key)
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")

    def _get_int(self, key: str, default: int) -> int:
        value = os.getenv(key)
        if value is None or value == "":
            return default
        try:
            return int(value)
        except ValueError:
            raise ValueError(f"Environment variable {key} must be an integer, got {value!r}")

    def _load_detection_configs(self) -> Dict[ActivityKind, DetectionConfig]:
        """Per-kind overrides, e.g. COMMAND_MIN_EVENTS=5 or TYPING_TIME_WINDOW_MS=3600000."""
        configs = {}
        for kind, default in DEFAULT_DETECTION_CONFIGS.items():
            prefix = kind.name
            configs[kind] = DetectionConfig(
                min_events=self._get_int(f"{prefix}_MIN_EVENTS", default.min_events),
                time_window_ms=self._get_int(f"{prefix}_TIME_WINDOW_MS", default.time_window_ms),
                regularity_threshold_ms=self._get_int(
                    f"{prefix}_REGULARITY_THRESHOLD_MS", default.regularity_threshold_ms
                ),
            )
        return configs

    def detection_configs(self) -> Dict[ActivityKind, DetectionConfig]:
        return dict(self.DETECTION)

# Singleton instance
shared_config = Config()
