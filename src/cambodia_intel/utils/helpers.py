"""Helper utilities for Cambodia Lending Intelligence."""

import calendar
import os
import logging
import yaml
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional
from pathlib import Path
from datetime import date, timedelta


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Load a YAML file and expand ${ENV} placeholders.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed dictionary (empty if the file is empty)
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}

    return _expand_env_vars(config)


def load_config(config_name: str = "settings.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_name: Name of config file in config/ directory

    Returns:
        Configuration dictionary
    """
    return load_yaml(get_project_root() / "config" / config_name)


def _expand_env_vars(config: Any) -> Any:
    """Recursively expand environment variables in config."""
    if isinstance(config, dict):
        return {k: _expand_env_vars(v) for k, v in config.items()}
    elif isinstance(config, list):
        return [_expand_env_vars(v) for v in config]
    elif isinstance(config, str):
        if config.startswith("${") and config.endswith("}"):
            env_var = config[2:-1]
            return os.getenv(env_var, config)
        return config
    return config


def freeze(value: Any) -> Any:
    """Recursively convert dicts to read-only mappings and lists to tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({k: freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of freeze(), for JSON output."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


def setup_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    format_str: Optional[str] = None,
) -> logging.Logger:
    """
    Set up logging configuration.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional file path for log output
        format_str: Optional custom format string

    Returns:
        Root logger
    """
    format_str = format_str or "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    handlers = [logging.StreamHandler()]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=format_str,
        handlers=handlers,
    )

    return logging.getLogger()


def format_currency(value: float, currency: str = "USD") -> str:
    """Format a number as currency."""
    if value >= 1_000_000_000:
        return f"${value/1_000_000_000:.2f}B {currency}"
    elif value >= 1_000_000:
        return f"${value/1_000_000:.2f}M {currency}"
    elif value >= 1_000:
        return f"${value/1_000:.2f}K {currency}"
    else:
        return f"${value:.2f} {currency}"


def format_amount(value: Optional[float], placeholder: str = "Not provided") -> str:
    """Format an amount with thousands separators for prompt text."""
    if not value:
        return placeholder
    if float(value).is_integer():
        return f"${int(value):,} USD"
    return f"${value:,.2f} USD"


def format_percentage(value: float, decimals: int = 1) -> str:
    """Format an already-scaled percentage value."""
    return f"{value:.{decimals}f}%"


def add_months(day: date, months: int) -> date:
    """Shift a date by whole months, clamping to the last day of the month."""
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def iso_date_after(days: int, today: Optional[date] = None) -> str:
    """YYYY-MM-DD for a date `days` after today."""
    return ((today or date.today()) + timedelta(days=days)).isoformat()
