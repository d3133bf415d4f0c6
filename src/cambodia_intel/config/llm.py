"""LangChain LLM Factory - Creates chat model instances for analysis calls.

Provides:
- Centralized LLM creation with consistent configuration
- Support for multiple providers (Groq, OpenAI, Anthropic)
- Model alias resolution (primary, fast, balanced) per provider
"""

import os
import logging
from typing import Any, Dict, Optional

from .settings import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, get_settings

logger = logging.getLogger(__name__)

# Try to import LangChain Groq
try:
    from langchain_groq import ChatGroq
    LANGCHAIN_GROQ_AVAILABLE = True
except ImportError:
    LANGCHAIN_GROQ_AVAILABLE = False
    ChatGroq = None
    logger.warning("langchain-groq not installed. Run: pip install langchain-groq")

# Try to import LangChain OpenAI
try:
    from langchain_openai import ChatOpenAI
    LANGCHAIN_OPENAI_AVAILABLE = True
except ImportError:
    LANGCHAIN_OPENAI_AVAILABLE = False
    ChatOpenAI = None

# Try to import LangChain Anthropic
try:
    from langchain_anthropic import ChatAnthropic
    LANGCHAIN_ANTHROPIC_AVAILABLE = True
except ImportError:
    LANGCHAIN_ANTHROPIC_AVAILABLE = False
    ChatAnthropic = None


# Model configurations per provider (overridden by settings.yaml)
GROQ_MODELS = {
    "primary": "llama-3.3-70b-versatile",
    "fast": "llama-3.1-8b-instant",
    "balanced": "llama3-70b-8192",
}

OPENAI_MODELS = {
    "primary": "gpt-4o",
    "fast": "gpt-4o-mini",
    "balanced": "gpt-4o-mini",
}

ANTHROPIC_MODELS = {
    "primary": "claude-3-5-sonnet-20241022",
    "fast": "claude-3-haiku-20240307",
    "balanced": "claude-3-5-sonnet-20241022",
}

PROVIDER_MODELS: Dict[str, Dict[str, str]] = {
    "groq": GROQ_MODELS,
    "openai": OPENAI_MODELS,
    "anthropic": ANTHROPIC_MODELS,
}

PROVIDER_KEYS = {
    "groq": "GROQ_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


def get_api_key(env_var_name: str, default: Optional[str] = None) -> Optional[str]:
    """
    Get an API key from the environment, then from settings.yaml.

    Args:
        env_var_name: The environment variable name (e.g., 'GROQ_API_KEY')
        default: Default value if not found in either location

    Returns:
        The API key value or default
    """
    env_key = os.getenv(env_var_name)
    if env_key:
        logger.debug(f"Using {env_var_name} from environment")
        return env_key

    for provider, var_name in PROVIDER_KEYS.items():
        if var_name == env_var_name:
            provider_settings = get_settings().llm.get_provider(provider)
            if provider_settings and provider_settings.api_key:
                logger.debug(f"Using {env_var_name} from settings")
                return provider_settings.api_key

    return default


def get_model_id(model: str, provider: Optional[str] = None) -> str:
    """Get the actual model ID from an alias."""
    provider = provider or get_settings().llm.provider
    models = dict(PROVIDER_MODELS.get(provider, GROQ_MODELS))
    provider_settings = get_settings().llm.get_provider(provider)
    if provider_settings:
        models.update(provider_settings.models)
    return models.get(model, model)


def is_provider_available(provider: Optional[str] = None) -> bool:
    """Check if the provider's LangChain package is installed."""
    provider = provider or get_settings().llm.provider
    return {
        "groq": LANGCHAIN_GROQ_AVAILABLE,
        "openai": LANGCHAIN_OPENAI_AVAILABLE,
        "anthropic": LANGCHAIN_ANTHROPIC_AVAILABLE,
    }.get(provider, False)


def get_chat_model(
    model: str = "primary",
    provider: Optional[str] = None,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    api_key: Optional[str] = None,
) -> Optional[Any]:
    """
    Create a LangChain chat model for the configured provider.

    Args:
        model: Model name or alias (primary, fast, balanced)
        provider: groq, openai or anthropic (defaults to settings.yaml)
        temperature: Sampling temperature (0-1)
        max_tokens: Maximum tokens in response
        api_key: Explicit API key (defaults to the provider's env var)

    Returns:
        Chat model instance or None if not available
    """
    llm_settings = get_settings().llm
    provider = provider or llm_settings.provider
    temperature = llm_settings.temperature if temperature is None else temperature
    max_tokens = max_tokens or llm_settings.max_tokens or DEFAULT_MAX_TOKENS

    if not is_provider_available(provider):
        logger.error(f"LangChain package for provider '{provider}' not installed")
        return None

    model_id = get_model_id(model, provider)
    key = api_key or get_api_key(PROVIDER_KEYS.get(provider, ""))
    if not key:
        logger.error(f"{PROVIDER_KEYS.get(provider, provider)} not set")
        return None

    try:
        if provider == "openai":
            llm = ChatOpenAI(
                model=model_id,
                temperature=temperature,
                max_tokens=max_tokens,
                openai_api_key=key,
            )
        elif provider == "anthropic":
            llm = ChatAnthropic(
                model=model_id,
                temperature=temperature,
                max_tokens=max_tokens,
                anthropic_api_key=key,
            )
        else:
            llm = ChatGroq(
                model=model_id,
                temperature=temperature,
                max_tokens=max_tokens,
                groq_api_key=key,
            )
        logger.debug(f"Created {provider} chat model: model={model_id}, temp={temperature}")
        return llm
    except Exception as e:
        logger.error(f"Failed to create {provider} chat model: {e}")
        return None


__all__ = [
    "DEFAULT_TEMPERATURE",
    "PROVIDER_MODELS",
    "get_api_key",
    "get_model_id",
    "get_chat_model",
    "is_provider_available",
]
