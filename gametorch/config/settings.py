"""Configuration settings for the GameTorch animation client."""

from typing import Dict, Any, Optional
from dataclasses import dataclass
import os


PRODUCTION_BASE_URL = "https://gametorch.app"
LOCAL_BASE_URL = "http://localhost:8000"

# Slack added on top of computed activity timeouts, in seconds
DOWNLOAD_TIMEOUT_MARGIN = 30


@dataclass
class APIConfig:
    """GameTorch HTTP API configuration."""
    api_key: Optional[str] = None
    base_url: str = PRODUCTION_BASE_URL
    local_base_url: str = LOCAL_BASE_URL
    request_timeout: float = 30.0  # seconds

    def resolve_base_url(self, local: bool = False) -> str:
        """Pick the endpoint for a run; ``local`` wins over ``base_url``."""
        return self.local_base_url if local else self.base_url


@dataclass
class PollingConfig:
    """Retry loop timings for status polling and artifact download."""
    poll_interval: int = 5  # seconds
    progress_interval: int = 30  # seconds between "still polling" notices
    artifact_retry_interval: int = 5  # seconds
    artifact_max_wait: int = 120  # seconds of cumulative waiting
    default_model_id: int = 6


@dataclass
class TemporalConfig:
    """Temporal server configuration."""
    host: str = "localhost:7233"
    namespace: str = "default"
    task_queue: str = "gametorch-animations"

    max_concurrent_activities: int = 10


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    console_format: str = "%(message)s"


class AppConfig:
    """Main application configuration."""

    def __init__(self):
        self.api = APIConfig()
        self.polling = PollingConfig()
        self.temporal = TemporalConfig()
        self.logging = LoggingConfig()

        # Load from environment variables
        self._load_from_env()

    def _load_from_env(self):
        """Load configuration from environment variables."""
        # GameTorch API configuration
        self.api.api_key = os.getenv("GAMETORCH_API_KEY")
        self.api.base_url = os.getenv("GAMETORCH_BASE_URL", self.api.base_url)
        self.api.request_timeout = float(os.getenv("GAMETORCH_REQUEST_TIMEOUT", self.api.request_timeout))

        # Temporal configuration
        self.temporal.host = os.getenv("TEMPORAL_HOST", self.temporal.host)
        self.temporal.namespace = os.getenv("TEMPORAL_NAMESPACE", self.temporal.namespace)
        self.temporal.task_queue = os.getenv("TEMPORAL_TASK_QUEUE", self.temporal.task_queue)
        self.temporal.max_concurrent_activities = int(
            os.getenv("MAX_CONCURRENT_ACTIVITIES", self.temporal.max_concurrent_activities)
        )

        # Logging configuration
        self.logging.level = os.getenv("LOG_LEVEL", self.logging.level)

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.api.api_key:
            errors.append("GAMETORCH_API_KEY environment variable is required")

        if self.polling.poll_interval <= 0 or self.polling.artifact_retry_interval <= 0:
            errors.append("Polling intervals must be positive")

        return errors

    def download_timeout(self) -> int:
        """Upper bound in seconds for one artifact download activity.

        Every attempt may use the full request timeout, and the waits between
        attempts add up to ``artifact_max_wait``.
        """
        attempts = self.polling.artifact_max_wait // self.polling.artifact_retry_interval + 1
        return int(attempts * self.api.request_timeout + self.polling.artifact_max_wait + DOWNLOAD_TIMEOUT_MARGIN)

    def download_heartbeat_timeout(self) -> int:
        """Longest gap between heartbeats: one request plus one retry wait."""
        return int(self.api.request_timeout + self.polling.artifact_retry_interval + DOWNLOAD_TIMEOUT_MARGIN)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary (excluding sensitive data)."""
        return {
            "api": {
                "base_url": self.api.base_url,
                "local_base_url": self.api.local_base_url,
                "request_timeout": self.api.request_timeout
            },
            "polling": {
                "poll_interval": self.polling.poll_interval,
                "progress_interval": self.polling.progress_interval,
                "artifact_retry_interval": self.polling.artifact_retry_interval,
                "artifact_max_wait": self.polling.artifact_max_wait,
                "default_model_id": self.polling.default_model_id
            },
            "temporal": {
                "host": self.temporal.host,
                "namespace": self.temporal.namespace,
                "task_queue": self.temporal.task_queue
            }
        }


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config
