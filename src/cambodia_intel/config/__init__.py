"""Configuration module for Cambodia Lending Intelligence."""

from .settings import AppSettings, LLMSettings, get_settings, reload_settings
from .reference import REFERENCE_TABLES, get_reference_table, preload_reference_tables
from .prompts import (
    DEFAULT_PROMPTS,
    build_prompt,
    get_all_prompts,
    get_execution_options,
    get_prompt,
    get_prompt_categories,
    get_prompt_text,
    reset_all_prompts,
    reset_prompt,
    update_prompt,
)
from .llm import get_chat_model, get_model_id, is_provider_available

__all__ = [
    # Settings
    "AppSettings",
    "LLMSettings",
    "get_settings",
    "reload_settings",
    # Reference data
    "REFERENCE_TABLES",
    "get_reference_table",
    "preload_reference_tables",
    # Prompts
    "DEFAULT_PROMPTS",
    "build_prompt",
    "get_all_prompts",
    "get_execution_options",
    "get_prompt",
    "get_prompt_categories",
    "get_prompt_text",
    "reset_all_prompts",
    "reset_prompt",
    "update_prompt",
    # LLM
    "get_chat_model",
    "get_model_id",
    "is_provider_available",
]
