"""Application configuration loader.

Loads centralized configuration from configs/sparkskool.yaml (or the path in
SPARKSKOOL_CONFIG) with built-in defaults when the file is missing.

Secrets never live in the YAML file: API keys and cache credentials are read
from environment variables named by the config.

Usage:
    from sparkskool.config.app_config import load_app_config, get_data_dir

    config = load_app_config()
    data_dir = get_data_dir()
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger(__name__)

# Config file path (relative to project root)
CONFIG_FILE = Path("configs/sparkskool.yaml")
CONFIG_ENV = "SPARKSKOOL_CONFIG"
DATA_DIR_ENV = "SPARKSKOOL_DATA_DIR"


@dataclass
class ProviderConfig:
    """Configuration for a single LLM provider."""

    base_url: str | None
    default_model: str
    api_key_env: str | None = None

    def get_api_key(self) -> str | None:
        """Get API key from environment variable."""
        if self.api_key_env:
            return os.environ.get(self.api_key_env)
        return None


@dataclass
class CacheConfig:
    """Upstash Redis REST cache settings."""

    url_env: str = "UPSTASH_REDIS_REST_URL"
    token_env: str = "UPSTASH_REDIS_REST_TOKEN"
    image_ttl: int = 86400
    slides_ttl: int = 3600
    timeout: float = 10.0

    def get_url(self) -> str | None:
        return os.environ.get(self.url_env)

    def get_token(self) -> str | None:
        return os.environ.get(self.token_env)


@dataclass
class GradingConfig:
    """Grading defaults."""

    model: str = "llama-3.3-70b-versatile"
    fast_model: str = "llama-3.1-8b-instant"
    pass_threshold: int = 80
    min_extraction_confidence: float = 0.8
    max_workers: int = 4


@dataclass
class AppConfig:
    """Application-wide configuration."""

    default_provider: str = "groq"
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    cache: CacheConfig = field(default_factory=CacheConfig)
    grading: GradingConfig = field(default_factory=GradingConfig)
    paths: dict[str, str] = field(default_factory=dict)


# Module-level cache
_cached_config: AppConfig | None = None


def _get_defaults() -> dict[str, Any]:
    """Get default configuration values."""
    return {
        "llm": {
            "default_provider": "groq",
            "providers": {
                "groq": {
                    "base_url": "https://api.groq.com/openai/v1",
                    "default_model": "llama-3.3-70b-versatile",
                    "api_key_env": "GROQ_API_KEY",
                },
                "openai": {
                    "base_url": None,
                    "default_model": "gpt-4o-mini",
                    "api_key_env": "OPENAI_API_KEY",
                },
                "lmstudio": {
                    "base_url": "http://localhost:1234/v1",
                    "default_model": "llama-3.2-3b-instruct",
                    "api_key_env": None,
                },
            },
        },
        "cache": {
            "url_env": "UPSTASH_REDIS_REST_URL",
            "token_env": "UPSTASH_REDIS_REST_TOKEN",
            "image_ttl": 86400,
            "slides_ttl": 3600,
        },
        "grading": {
            "model": "llama-3.3-70b-versatile",
            "fast_model": "llama-3.1-8b-instant",
            "pass_threshold": 80,
            "min_extraction_confidence": 0.8,
            "max_workers": 4,
        },
        "paths": {
            "data_dir": "data",
        },
    }


def _parse_config(data: dict[str, Any]) -> AppConfig:
    """Parse configuration dictionary into AppConfig object."""
    defaults = _get_defaults()

    llm_data = data.get("llm") or defaults["llm"]
    providers = {}
    for name, pconfig in (llm_data.get("providers") or defaults["llm"]["providers"]).items():
        providers[name] = ProviderConfig(
            base_url=pconfig.get("base_url"),
            default_model=pconfig.get("default_model", "default"),
            api_key_env=pconfig.get("api_key_env"),
        )

    cache_data = data.get("cache", {})
    cache = CacheConfig(
        url_env=cache_data.get("url_env", "UPSTASH_REDIS_REST_URL"),
        token_env=cache_data.get("token_env", "UPSTASH_REDIS_REST_TOKEN"),
        image_ttl=cache_data.get("image_ttl", 86400),
        slides_ttl=cache_data.get("slides_ttl", 3600),
        timeout=cache_data.get("timeout", 10.0),
    )

    grading_data = data.get("grading", {})
    grading = GradingConfig(
        model=grading_data.get("model", "llama-3.3-70b-versatile"),
        fast_model=grading_data.get("fast_model", "llama-3.1-8b-instant"),
        pass_threshold=grading_data.get("pass_threshold", 80),
        min_extraction_confidence=grading_data.get("min_extraction_confidence", 0.8),
        max_workers=grading_data.get("max_workers", 4),
    )

    return AppConfig(
        default_provider=llm_data.get("default_provider", "groq"),
        providers=providers,
        cache=cache,
        grading=grading,
        paths=data.get("paths", defaults["paths"]),
    )


def _config_path() -> Path:
    override = os.environ.get(CONFIG_ENV)
    return Path(override) if override else CONFIG_FILE


def load_app_config(force_reload: bool = False) -> AppConfig:
    """Load application config, falling back to defaults.

    Args:
        force_reload: If True, ignore cached config and reload from file.

    Returns:
        AppConfig object with all settings.
    """
    global _cached_config

    if _cached_config is not None and not force_reload:
        return _cached_config

    config_path = _config_path()
    if config_path.exists():
        logger.debug("loading_app_config", source=str(config_path))
        data = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    else:
        logger.info("using_default_config")
        data = _get_defaults()

    _cached_config = _parse_config(data)
    return _cached_config


def get_provider_config(provider: str) -> ProviderConfig | None:
    """Get configuration for a specific provider.

    Returns:
        ProviderConfig or None if provider not found.
    """
    config = load_app_config()
    return config.providers.get(provider)


def get_data_dir() -> Path:
    """Resolve the data directory (env var wins over config)."""
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        return Path(override)
    return Path(load_app_config().paths.get("data_dir", "data"))


def clear_config_cache() -> None:
    """Clear the configuration cache.

    Useful for testing or when config is modified at runtime.
    """
    global _cached_config
    _cached_config = None
