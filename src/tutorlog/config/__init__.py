"""Configuration package for tutorlog."""

from tutorlog.config.app_config import (
    AnalyticsConfig,
    AppConfig,
    clear_config_cache,
    load_app_config,
)

__all__ = [
    "AnalyticsConfig",
    "AppConfig",
    "clear_config_cache",
    "load_app_config",
]
