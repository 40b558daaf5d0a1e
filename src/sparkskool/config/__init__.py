"""Configuration package for SparkSkool."""

from sparkskool.config.app_config import (
    AppConfig,
    CacheConfig,
    GradingConfig,
    ProviderConfig,
    clear_config_cache,
    get_data_dir,
    get_provider_config,
    load_app_config,
)

__all__ = [
    "AppConfig",
    "CacheConfig",
    "GradingConfig",
    "ProviderConfig",
    "clear_config_cache",
    "get_data_dir",
    "get_provider_config",
    "load_app_config",
]
