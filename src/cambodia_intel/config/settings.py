"""
Application settings for Cambodia Lending Intelligence.

Provides:
- YAML-based configuration loading (config/settings.yaml)
- Environment variable substitution
- Type-safe access to config values

Usage:
    from cambodia_intel.config.settings import get_settings

    settings = get_settings()
    provider = settings.llm.provider
"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Dict, List, Optional

from ..utils.helpers import load_config

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER = "groq"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_TOKENS = 2000


# =============================================================================
# CONFIGURATION DATA CLASSES
# =============================================================================

@dataclass(frozen=True)
class ProviderSettings:
    """Configuration for a single LLM provider."""
    name: str
    api_key: str = ""
    models: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class LLMSettings:
    """LLM defaults shared by every analysis call."""
    provider: str = DEFAULT_PROVIDER
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    providers: Dict[str, ProviderSettings] = field(default_factory=dict)

    def get_provider(self, name: Optional[str] = None) -> Optional[ProviderSettings]:
        return self.providers.get(name or self.provider)


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass(frozen=True)
class AppSettings:
    """Top-level settings object."""
    llm: LLMSettings = field(default_factory=LLMSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppSettings":
        llm_data = data.get("llm") or {}
        providers = {}
        for name, provider_data in (llm_data.get("providers") or {}).items():
            provider_data = provider_data or {}
            providers[name] = ProviderSettings(
                name=name,
                api_key=_resolved(provider_data.get("api_key")),
                models=dict(provider_data.get("models") or {}),
            )

        log_data = data.get("logging") or {}
        api_data = data.get("api") or {}

        return cls(
            llm=LLMSettings(
                provider=llm_data.get("provider") or DEFAULT_PROVIDER,
                temperature=float(llm_data.get("temperature", DEFAULT_TEMPERATURE)),
                max_tokens=int(llm_data.get("max_tokens", DEFAULT_MAX_TOKENS)),
                providers=providers,
            ),
            logging=LoggingSettings(
                level=log_data.get("level") or "INFO",
                file=log_data.get("file"),
            ),
            cors_origins=list(api_data.get("cors_origins") or ["*"]),
        )


def _resolved(value: Optional[str]) -> str:
    """Treat unexpanded ${VAR} placeholders as unset."""
    if not value or (value.startswith("${") and value.endswith("}")):
        return ""
    return value


# =============================================================================
# ACCESSORS
# =============================================================================

@lru_cache(maxsize=None)
def get_settings(config_name: str = "settings.yaml") -> AppSettings:
    """Load settings once per process. Missing file falls back to defaults."""
    try:
        data = load_config(config_name)
    except FileNotFoundError:
        logger.info(f"No {config_name} found, using default settings")
        return AppSettings()

    settings = AppSettings.from_dict(data)
    logger.debug(f"Loaded settings: provider={settings.llm.provider}")
    return settings


def reload_settings() -> AppSettings:
    """Clear the settings cache and load again."""
    get_settings.cache_clear()
    return get_settings()
