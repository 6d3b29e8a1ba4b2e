from .settings import (
    PRODUCTION_BASE_URL,
    LOCAL_BASE_URL,
    APIConfig,
    PollingConfig,
    TemporalConfig,
    LoggingConfig,
    AppConfig,
    get_config,
    reload_config
)

__all__ = [
    "PRODUCTION_BASE_URL",
    "LOCAL_BASE_URL",
    "APIConfig",
    "PollingConfig",
    "TemporalConfig",
    "LoggingConfig",
    "AppConfig",
    "get_config",
    "reload_config"
]
